"""HTTP client helper."""

from __future__ import annotations

import json
from typing import Any

import aiohttp

from ..core.exceptions import MalformedResponseError
from ..runtime.retry import error_for_status


class HTTPClient:
    """Async HTTP client wrapper.

    Error statuses are raised as typed ReadErrors and non-JSON bodies as
    MalformedResponseError, so the retry layer can classify them directly.
    """

    def __init__(self, base_url: str | None = None, timeout: float = 30.0) -> None:
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    def _url(self, url: str) -> str:
        # If base_url is set and url is relative, combine them
        if self.base_url and not url.startswith("http"):
            return f"{self.base_url.rstrip('/')}{url}"
        return url

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET request."""
        async with self.session.get(self._url(url), params=params, headers=headers) as response:
            return await self._decode(response)

    async def post(
        self,
        url: str,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """POST request with a JSON body."""
        async with self.session.post(self._url(url), json=json, headers=headers) as response:
            return await self._decode(response)

    async def _decode(self, response: aiohttp.ClientResponse) -> Any:
        if response.status >= 400:
            body = await response.text()
            message, vm_status = _error_details(body, response.status)
            raise error_for_status(
                response.status, message, response.headers, vm_status=vm_status
            )
        try:
            return await response.json(content_type=None)
        except (aiohttp.ContentTypeError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedResponseError(f"response is not JSON: {e}") from e

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()


def _error_details(body: str, status: int) -> tuple[str, str | None]:
    """Pull ``message``/``error_code`` out of a fullnode error body."""
    try:
        payload = json.loads(body) if body else None
    except json.JSONDecodeError:
        payload = None
    if isinstance(payload, dict):
        message = str(payload.get("message") or f"HTTP {status}")
        code = payload.get("vm_error_code", payload.get("error_code"))
        return message, str(code) if code is not None else None
    return (body.strip() or f"HTTP {status}"), None
