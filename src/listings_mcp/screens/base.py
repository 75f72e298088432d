"""Shared state machine for form-driven screens."""

import logging
from enum import Enum
from typing import Mapping, Optional

from listings_mcp.api.client import ApiClient
from listings_mcp.api.endpoint import Endpoint
from listings_mcp.api.lifetime import Lifetime
from listings_mcp.models import HttpMethod
from listings_mcp.routes import Navigator
from listings_mcp.session import SessionAccessor

logger = logging.getLogger(__name__)


class ScreenState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


class ValidationError(Exception):
    """Local field-level validation failure; never reaches the network."""

    def __init__(self, field_errors: Mapping[str, str]):
        super().__init__("; ".join(field_errors.values()))
        self.field_errors = dict(field_errors)


def require(values: Mapping[str, str], messages: Mapping[str, str]) -> None:
    """Raise ValidationError for every blank field listed in ``messages``."""
    errors = {
        name: message
        for name, message in messages.items()
        if not (values.get(name) or "").strip()
    }
    if errors:
        raise ValidationError(errors)


class Screen:
    def __init__(
        self,
        *,
        client: ApiClient,
        session: SessionAccessor,
        navigator: Navigator,
    ):
        self.client = client
        self.session = session
        self.navigator = navigator
        self.lifetime = Lifetime()
        self.state = ScreenState.IDLE
        self.field_errors: dict[str, str] = {}
        self.alert: Optional[str] = None

    def endpoint(self, url: str, method: HttpMethod, **kwargs) -> Endpoint:
        """Create an endpoint whose results are bound to this screen's lifetime."""
        return Endpoint(
            url,
            method,
            client=self.client,
            session=self.session,
            lifetime=self.lifetime,
            **kwargs,
        )

    def _validate(self) -> bool:
        self.state = ScreenState.VALIDATING
        try:
            self.validate()
        except ValidationError as exc:
            self.field_errors = exc.field_errors
            self.state = ScreenState.IDLE
            return False
        self.field_errors = {}
        self.alert = None
        return True

    def validate(self) -> None:
        """Raise ValidationError when the form is incomplete."""

    def fail(self, message: str) -> None:
        self.alert = message
        self.state = ScreenState.FAILED

    def dismiss_alert(self) -> None:
        self.alert = None

    @property
    def mounted(self) -> bool:
        return self.lifetime.alive

    def unmount(self) -> None:
        self.lifetime.close()
