"""Sign-in screen."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from listings_mcp.api.endpoint import UNEXPECTED_RESPONSE
from listings_mcp.api.urls import LOGIN_PATH
from listings_mcp.models import AuthResponse, HttpMethod, SessionUser
from listings_mcp.routes import DASHBOARD
from listings_mcp.screens.base import Screen, ScreenState, require

logger = logging.getLogger(__name__)


class AuthScreen(Screen, ABC):
    """Submits credentials and stores the resulting session."""

    path: str = LOGIN_PATH

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self.auth = self.endpoint(self.path, HttpMethod.POST, response_model=AuthResponse)
        self.user: Optional[SessionUser] = None

    @abstractmethod
    def payload(self) -> dict[str, Any]:
        """Request body sent to the auth endpoint."""

    def fallback_name(self) -> Optional[str]:
        return None

    async def submit(self) -> ScreenState:
        if not self._validate():
            return self.state

        self.state = ScreenState.SUBMITTING
        await self.auth.execute(override_body=self.payload())
        if not self.mounted:
            return self.state

        if self.auth.error is not None:
            self.fail(self.auth.error)
            return self.state

        response: AuthResponse = self.auth.data
        if response is None or response.user is None:
            self.fail(UNEXPECTED_RESPONSE)
            return self.state

        self.user = self.session.save_login(response, self.fallback_name())
        logger.info("Signed in as %s", self.user.email)
        self.state = ScreenState.SUCCESS
        self.navigator.navigate(DASHBOARD, replace=True)
        return self.state


class LoginScreen(AuthScreen):
    path = LOGIN_PATH

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self.username = ""
        self.password = ""
        self.remember_me = False

    def validate(self) -> None:
        require(
            {"username": self.username, "password": self.password},
            {"username": "Username is required", "password": "Password is required"},
        )

    def payload(self) -> dict[str, Any]:
        return {
            "username": self.username.strip(),
            "password": self.password,
            "rememberMe": self.remember_me,
        }
