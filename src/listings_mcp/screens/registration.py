"""Sign-up screen."""

from typing import Any, Optional

from listings_mcp.api.urls import REGISTER_PATH
from listings_mcp.screens.base import require
from listings_mcp.screens.login import AuthScreen


class RegistrationScreen(AuthScreen):
    path = REGISTER_PATH

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self.username = ""
        self.full_name = ""
        self.password = ""

    def validate(self) -> None:
        require(
            {
                "username": self.username,
                "full_name": self.full_name,
                "password": self.password,
            },
            {
                "username": "Username is required",
                "full_name": "Full name is required",
                "password": "Password is required",
            },
        )

    def payload(self) -> dict[str, Any]:
        return {
            "username": self.username.strip(),
            "password": self.password,
            "full_name": self.full_name.strip(),
        }

    def fallback_name(self) -> Optional[str]:
        return self.full_name.strip() or None
