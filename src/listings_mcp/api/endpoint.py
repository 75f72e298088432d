"""Reusable request unit that tracks loading, error and data state."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from listings_mcp.api.client import ApiClient
from listings_mcp.api.lifetime import Lifetime
from listings_mcp.api.multipart import MultipartForm
from listings_mcp.api.urls import resolve_url
from listings_mcp.models import HttpMethod
from listings_mcp.session import SessionAccessor

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong"
UNEXPECTED_RESPONSE = "Unexpected response from server"

T = TypeVar("T")


@dataclass(frozen=True)
class RequestOutcome(Generic[T]):
    """Snapshot of an endpoint's state. Replaced, never mutated."""

    data: Optional[T] = None
    error: Optional[str] = None
    is_loading: bool = False


Listener = Callable[[RequestOutcome], None]


def error_message(exc: BaseException) -> str:
    if isinstance(exc, ValidationError):
        return UNEXPECTED_RESPONSE
    return str(exc) or GENERIC_ERROR_MESSAGE


class Endpoint(Generic[T]):
    """One API endpoint with a default descriptor and an observable outcome.

    ``execute`` never raises: failures end up in ``outcome.error``. Calls on
    the same instance are not serialized; when two overlap, whichever
    completes last determines the outcome. Await one call before issuing the
    next when ordering matters.
    """

    def __init__(
        self,
        url: str,
        method: HttpMethod,
        *,
        client: ApiClient,
        session: SessionAccessor,
        body: Any = None,
        response_model: type[BaseModel] | None = None,
        lifetime: Lifetime | None = None,
    ):
        self._url = url
        self._method = HttpMethod(method)
        self._body = body
        self._client = client
        self._session = session
        self._response_model = response_model
        self._lifetime = lifetime or Lifetime()
        self._outcome: RequestOutcome[T] = RequestOutcome()
        self._listeners: list[Listener] = []

    @property
    def outcome(self) -> RequestOutcome[T]:
        return self._outcome

    @property
    def data(self) -> Optional[T]:
        return self._outcome.data

    @property
    def error(self) -> Optional[str]:
        return self._outcome.error

    @property
    def is_loading(self) -> bool:
        return self._outcome.is_loading

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback for outcome changes; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, outcome: RequestOutcome[T]) -> None:
        if not self._lifetime.alive:
            logger.debug("Dropping %s result for %s: owner is gone", self._method.value, self._url)
            return
        self._outcome = outcome
        for listener in list(self._listeners):
            listener(outcome)

    def build_headers(self, body: Any) -> dict[str, str]:
        headers: dict[str, str] = {}
        if not isinstance(body, MultipartForm):
            headers["Content-Type"] = "application/json"
        token = self._session.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def execute(
        self,
        override_url: str | None = None,
        override_body: Any = None,
        override_method: HttpMethod | str | None = None,
    ) -> None:
        self._publish(RequestOutcome(is_loading=True))
        try:
            body = override_body if override_body is not None else self._body
            if isinstance(body, BaseModel):
                body = body.model_dump(mode="json")
            method = HttpMethod(override_method) if override_method else self._method
            headers = self.build_headers(body)
            url = resolve_url(override_url or self._url, self._client.config)

            payload = await self._client.send(method, url, headers, body)
            if self._response_model is not None:
                payload = self._response_model.model_validate(payload)
        except asyncio.CancelledError:
            self._publish(RequestOutcome())
            raise
        except Exception as exc:
            message = error_message(exc)
            logger.error("API Error: %s", message)
            self._publish(RequestOutcome(error=message))
            return
        self._publish(RequestOutcome(data=payload))

    def start(
        self,
        override_url: str | None = None,
        override_body: Any = None,
        override_method: HttpMethod | str | None = None,
    ) -> asyncio.Task:
        """Run ``execute`` as a task owned by this endpoint's lifetime."""
        return self._lifetime.spawn(
            self.execute(override_url, override_body, override_method)
        )
