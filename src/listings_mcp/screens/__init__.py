"""Screen controllers for sign-in, sign-up and the listings dashboard."""

from listings_mcp.screens.base import Screen, ScreenState, ValidationError
from listings_mcp.screens.dashboard import DashboardScreen
from listings_mcp.screens.login import LoginScreen
from listings_mcp.screens.registration import RegistrationScreen

__all__ = [
    "Screen",
    "ScreenState",
    "ValidationError",
    "DashboardScreen",
    "LoginScreen",
    "RegistrationScreen",
]
