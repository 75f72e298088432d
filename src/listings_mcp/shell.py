"""Navigation shell: signed-in identity and logout."""

import logging
from typing import Optional

from listings_mcp.api.client import ApiClient
from listings_mcp.api.endpoint import Endpoint
from listings_mcp.api.urls import LOGOUT_PATH
from listings_mcp.models import Capability, HttpMethod, Role, SessionUser
from listings_mcp.routes import LOGIN, Navigator
from listings_mcp.session import SessionAccessor, display_name_for

logger = logging.getLogger(__name__)


def role_display_name(label: str) -> str:
    """Display label for a role label; unknown labels are shown as-is."""
    role = Role.parse(label)
    return role.display_name if role is not None else label


class NavigationShell:
    def __init__(
        self,
        *,
        client: ApiClient,
        session: SessionAccessor,
        navigator: Navigator,
    ):
        self._session = session
        self._navigator = navigator
        self._logout = Endpoint(
            LOGOUT_PATH, HttpMethod.POST, client=client, session=session
        )

    @property
    def user(self) -> Optional[SessionUser]:
        return self._session.user

    @property
    def identity_label(self) -> str:
        user = self.user
        if user is None:
            return ""
        return f"{display_name_for(user)} ({role_display_name(user.role)})"

    def can(self, capability: Capability) -> bool:
        user = self.user
        return user is not None and user.can(capability)

    async def logout(self) -> str:
        """Tell the API the session ended, clear it locally, and go to login.

        The server call is best effort; the local session is cleared either way.
        """
        if self._session.token:
            await self._logout.execute()
            if self._logout.error is not None:
                logger.warning("Logout API returned an error: %s", self._logout.error)
        self._session.clear()
        return self._navigator.navigate(LOGIN, replace=True)
