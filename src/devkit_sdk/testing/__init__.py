"""Testing support – fakes for exercising code that depends on DevKitClient.

Usage::

    from devkit_sdk.testing import FakeClock, FakeTransport
"""

from devkit_sdk.testing.fakes import FakeClock, FakeTransport, FrozenClock, RecordedCall

__all__ = ["FakeClock", "FakeTransport", "FrozenClock", "RecordedCall"]
