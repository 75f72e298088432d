"""Persisted session state: bearer token and current user."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from pydantic import ValidationError

from listings_mcp.config import ListingsConfig
from listings_mcp.models import AuthResponse, SessionUser

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"
USER_KEY = "user"


class SessionStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def clear(self) -> None: ...


class InMemorySessionStore:
    def __init__(self, initial: dict[str, str] | None = None):
        self._store: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        self._store[key] = value

    def remove(self, key: str) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


class FileSessionStore(InMemorySessionStore):
    """Key-value store persisted as a JSON object on disk.

    The file is rewritten on every mutation. A missing or corrupt file is
    treated as an empty store.
    """

    def __init__(self, path: Path):
        super().__init__(self._load(path))
        self._path = path

    @staticmethod
    def _load(path: Path) -> dict[str, str]:
        try:
            raw = json.loads(path.read_text())
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", path, exc)
            return {}
        if not isinstance(raw, dict):
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _flush(self) -> None:
        """Write the store atomically, readable by the owner only."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".session-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as fh:
                json.dump(self._store, fh)
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def set(self, key: str, value: str) -> None:
        super().set(key, value)
        self._flush()

    def remove(self, key: str) -> None:
        super().remove(key)
        self._flush()

    def clear(self) -> None:
        super().clear()
        self._flush()


def display_name_for(user: SessionUser, fallback: Optional[str] = None) -> str:
    """Full name to show for a user, falling back to the email local part."""
    return user.full_name or fallback or user.email.split("@")[0]


class SessionAccessor:
    """Typed access to the token and user record held in a SessionStore."""

    def __init__(self, store: SessionStore):
        self._store = store

    @property
    def token(self) -> Optional[str]:
        return self._store.get(TOKEN_KEY) or None

    @property
    def user(self) -> Optional[SessionUser]:
        raw = self._store.get(USER_KEY)
        if not raw:
            return None
        try:
            return SessionUser.model_validate_json(raw)
        except ValidationError:
            logger.warning("Stored user record is malformed; ignoring it")
            return None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def save(self, token: Optional[str], user: Optional[SessionUser]) -> None:
        if token:
            self._store.set(TOKEN_KEY, token)
        if user is not None:
            self._store.set(USER_KEY, user.model_dump_json())

    def save_login(
        self, response: AuthResponse, fallback_name: Optional[str] = None
    ) -> Optional[SessionUser]:
        """Persist a login/registration payload.

        The stored user always carries a full name, and the generic
        "authenticated" role label is stored as "user".
        """
        user = response.user
        if user is not None:
            role = "user" if user.role == "authenticated" else user.role
            user = user.model_copy(
                update={"full_name": display_name_for(user, fallback_name), "role": role}
            )
        self.save(response.access_token, user)
        return user

    def clear(self) -> None:
        self._store.remove(TOKEN_KEY)
        self._store.remove(USER_KEY)


_singleton: SessionAccessor | None = None


def get_session(config: ListingsConfig | None = None) -> SessionAccessor:
    """Return a module-level SessionAccessor over the durable file store."""
    global _singleton
    if _singleton is None:
        config = config or ListingsConfig()
        _singleton = SessionAccessor(FileSessionStore(config.session_file))
    return _singleton
