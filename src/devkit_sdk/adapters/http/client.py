"""HTTP adapter – HttpxTransport for the DevKit service API."""
from __future__ import annotations

from typing import Any, Protocol

import httpx

from devkit_sdk.config.settings.options import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_MS
from devkit_sdk.kernel.errors import AuthenticationError, RemoteError
from devkit_sdk.kernel.errors import TimeoutError as RequestTimeoutError
from devkit_sdk.observability.logging import get_logger
from devkit_sdk.resilience.timeouts import TimeoutPolicy

logger = get_logger(__name__)


class Transport(Protocol):
    """Port: authenticated JSON calls against the service API."""

    async def get(self, path: str) -> Any: ...
    async def post(self, path: str, body: Any = None) -> Any: ...
    async def put(self, path: str, body: Any = None) -> Any: ...
    async def delete(self, path: str) -> None: ...
    async def aclose(self) -> None: ...


class HttpxTransport:
    """Thin async httpx wrapper: bearer auth, one deadline per call, structured errors.

    No retries and no caching; failures surface to the caller as
    :class:`AuthenticationError` (401), :class:`RemoteError` (other status,
    network failure, bad JSON) or :class:`~devkit_sdk.kernel.errors.TimeoutError`.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        **kwargs: Any,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = TimeoutPolicy(timeout_ms)
        kwargs.setdefault("timeout", timeout_ms / 1000)
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            **kwargs,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> "HttpxTransport":
        await self._client.__aenter__()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self._client.__aexit__(*args)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, path: str) -> Any:
        return await self._request("GET", path)

    async def post(self, path: str, body: Any = None) -> Any:
        return await self._request("POST", path, body)

    async def put(self, path: str, body: Any = None) -> Any:
        return await self._request("PUT", path, body)

    async def delete(self, path: str) -> None:
        await self._request("DELETE", path, expect_body=False)

    async def _request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        expect_body: bool = True,
    ) -> Any:
        kwargs: dict[str, Any] = {}
        if body is not None:
            kwargs["json"] = body
        operation = f"HTTP {method} {path}"
        try:
            response = await self._timeout.execute(
                lambda: self._client.request(method, path, **kwargs), operation=operation
            )
        except httpx.TimeoutException as exc:
            # httpx's own phase timeouts count as the same deadline
            raise self._timeout_error(operation) from exc
        except httpx.HTTPError as exc:
            logger.warning("http.request_failed", method=method, path=path, error=type(exc).__name__)
            raise RemoteError(f"Network error: {method} {path}", cause=exc) from exc

        if response.status_code == 401:
            raise AuthenticationError()
        if not response.is_success:
            logger.warning("http.request_failed", method=method, path=path, status_code=response.status_code)
            raise RemoteError(
                f"HTTP error: {response.status_code} from {method} {path}",
                status_code=response.status_code,
            )
        if not expect_body:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteError(
                f"Invalid JSON in response from {method} {path}",
                status_code=response.status_code,
                cause=exc,
            ) from exc

    def _timeout_error(self, operation: str) -> RequestTimeoutError:
        return RequestTimeoutError(
            f"{operation} timed out after {self._timeout.timeout_ms}ms",
            timeout_ms=self._timeout.timeout_ms,
        )


__all__ = ["HttpxTransport", "Transport"]
