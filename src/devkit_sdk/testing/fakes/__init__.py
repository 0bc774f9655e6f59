"""Testing fakes – in-memory doubles for the SDK's ports."""
from devkit_sdk.testing.fakes.clock import FakeClock
from devkit_sdk.testing.fakes.transport import FakeTransport, RecordedCall
from devkit_sdk.kernel.time import FrozenClock

__all__ = ["FakeClock", "FakeTransport", "FrozenClock", "RecordedCall"]
