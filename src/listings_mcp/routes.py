"""Route guard and navigation history."""

import logging

from listings_mcp.session import SessionAccessor

logger = logging.getLogger(__name__)

LOGIN = "/login"
REGISTRATION = "/registration"
DASHBOARD = "/dashboard"
ROOT = "/"

PUBLIC_ROUTES = (LOGIN, REGISTRATION)
PROTECTED_ROUTES = (DASHBOARD,)


def resolve_route(path: str, authenticated: bool) -> str:
    """Apply the route guard and return where the user actually lands.

    Signed-in users skip the login and registration screens; signed-out
    users are sent to login from protected routes and from the root.
    """
    if path == ROOT:
        return DASHBOARD if authenticated else LOGIN
    if path in PUBLIC_ROUTES:
        return DASHBOARD if authenticated else path
    if path in PROTECTED_ROUTES:
        return path if authenticated else LOGIN
    return resolve_route(ROOT, authenticated)


class Navigator:
    """Records route transitions, guarded by the current session."""

    def __init__(self, session: SessionAccessor, start: str = ROOT):
        self._session = session
        self.history: list[str] = [resolve_route(start, session.is_authenticated)]

    @property
    def current(self) -> str:
        return self.history[-1]

    def navigate(self, path: str, replace: bool = False) -> str:
        target = resolve_route(path, self._session.is_authenticated)
        if target != path:
            logger.info("Redirecting %s -> %s", path, target)
        if replace:
            self.history[-1] = target
        else:
            self.history.append(target)
        return target
