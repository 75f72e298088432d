"""Async HTTP transport for the listings API."""

import json
import logging
from typing import Any

from curl_cffi.requests import AsyncSession, RequestsError

from listings_mcp.api.multipart import MultipartForm
from listings_mcp.config import ListingsConfig
from listings_mcp.models import HttpMethod

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Request failed"


class ApiError(Exception):
    """Base exception for listings API errors."""


class RequestFailed(ApiError):
    """Raised when the API answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TransportError(ApiError):
    """Raised when the request could not be sent or the reply not decoded."""


def failure_message(payload: Any) -> str:
    """Pick the user-facing message out of an error response body."""
    if isinstance(payload, dict):
        for key in ("error", "message"):
            value = payload.get(key)
            if value:
                return str(value)
    return DEFAULT_FAILURE_MESSAGE


class ApiClient:
    """Sends one request and returns the decoded JSON body."""

    def __init__(self, config: ListingsConfig | None = None):
        self._config = config or ListingsConfig()
        self._client: AsyncSession | None = None

    @property
    def config(self) -> ListingsConfig:
        return self._config

    def _get_client(self) -> AsyncSession:
        if self._client is None:
            self._client = AsyncSession(
                impersonate=self._config.impersonate_browser,
                timeout=self._config.timeout_seconds,
                allow_redirects=True,
            )
        return self._client

    async def send(
        self,
        method: HttpMethod,
        url: str,
        headers: dict[str, str],
        body: Any = None,
    ) -> Any:
        kwargs: dict[str, Any] = {"headers": headers}
        mime = None
        if method != HttpMethod.GET and body is not None:
            if isinstance(body, MultipartForm):
                mime = body.to_curl_mime()
                kwargs["multipart"] = mime
            else:
                kwargs["data"] = json.dumps(body)

        client = self._get_client()
        try:
            response = await client.request(method.value, url, **kwargs)
        except RequestsError as exc:
            raise TransportError(f"Request failed for URL: {url}: {exc}") from exc
        finally:
            if mime is not None:
                mime.close()

        try:
            payload = json.loads(response.text)
        except ValueError as exc:
            raise TransportError(
                f"Invalid JSON in response ({response.status_code}) for URL: {url}"
            ) from exc

        if not 200 <= response.status_code < 300:
            raise RequestFailed(failure_message(payload), response.status_code)
        return payload

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


_singleton: ApiClient | None = None


def get_client() -> ApiClient:
    """Return a module-level singleton ApiClient."""
    global _singleton
    if _singleton is None:
        _singleton = ApiClient()
    return _singleton
