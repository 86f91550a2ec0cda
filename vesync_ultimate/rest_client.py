"""REST transport for the VeSync cloud API."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

import httpx

from .const import API_BASE_URL

_LOGGER = logging.getLogger(__name__)

_METHODS = frozenset({"get", "post", "put"})


class VeSyncRestClient:
    """Issue JSON requests and report vendor errors through status and body."""

    def __init__(
        self,
        http_client_getter: Callable[[], httpx.AsyncClient | None],
        *,
        base_url: str = API_BASE_URL,
    ) -> None:
        """Initialise the client with a lazily resolved HTTP client."""

        self._http_client_getter = http_client_getter
        self._base_url = base_url.rstrip("/")

    @property
    def base_url(self) -> str:
        """Return the API base URL."""

        return self._base_url

    async def async_call(
        self,
        path: str,
        method: str,
        body: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> tuple[Any, int]:
        """Send a request and return ``(parsed_body, status_code)``.

        Non-2xx answers are returned like any other response. Only faults of
        the HTTP transport itself are raised.
        """

        verb = method.lower()
        if verb not in _METHODS:
            raise ValueError(f"Unsupported HTTP method {method}")
        client = self._require_http_client()
        url = f"{self._base_url}{path}"
        request_kwargs: dict[str, Any] = {"headers": dict(headers or {})}
        if body is not None:
            if verb == "get":
                request_kwargs["params"] = dict(body)
            else:
                request_kwargs["json"] = dict(body)
        _LOGGER.debug("%s %s", verb.upper(), path)
        try:
            response = await client.request(verb.upper(), url, **request_kwargs)
        except httpx.TransportError as err:
            _LOGGER.error("Request to %s failed: %s", path, err)
            raise
        payload = self._decode(response)
        if response.status_code != 200:
            _LOGGER.debug("%s answered with HTTP %s", path, response.status_code)
        return payload, response.status_code

    def _require_http_client(self) -> httpx.AsyncClient:
        client = self._http_client_getter()
        if client is None:
            raise RuntimeError("HTTP client is not initialised")
        return client

    def _decode(self, response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            _LOGGER.debug("Response body is not JSON: %r", response.text[:200])
            return None
