"""HTTP adapter – httpx transport."""
from devkit_sdk.adapters.http.client import HttpxTransport, Transport

__all__ = ["HttpxTransport", "Transport"]
