"""Session context: stored credentials, theme preference and navigation.

Everything a browser page would read from ``localStorage`` or
``sessionStorage`` lives here and is passed explicitly to the client and
page controllers.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from pathlib import Path
from typing import Any, Literal, Protocol

from trackmykid.normalize import safe_float
from trackmykid.routes import Navigator

_logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
THEME_KEY = "theme"

Theme = Literal["light", "dark"]


class TokenStorage(Protocol):
    """Key/value storage for small string values."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """Session-scoped storage; forgotten when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class FileStorage:
    """Durable storage backed by a JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("Ignoring unreadable state file %s", self._path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _save(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


def decode_jwt_payload(token: str) -> dict[str, Any] | None:
    """Decode the (unverified) payload segment of a JWT.

    Returns ``None`` when *token* is not a JWT or the payload is not a JSON
    object.
    """
    parts = token.split(".")
    if len(parts) < 2 or not parts[1]:
        return None
    segment = parts[1]
    segment += "=" * (-len(segment) % 4)
    try:
        decoded = base64.urlsafe_b64decode(segment.encode("ascii"))
        payload = json.loads(decoded.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        return None
    return payload if isinstance(payload, dict) else None


class SessionContext:
    """Credentials, preferences and navigation for one running front-end.

    Parameters
    ----------
    durable : TokenStorage, optional
        Storage that survives restarts ("remember me").  Defaults to memory.
    session : TokenStorage, optional
        Storage scoped to this process.
    navigator : Navigator, optional
        Route tracker used for login redirects.
    """

    def __init__(
        self,
        *,
        durable: TokenStorage | None = None,
        session: TokenStorage | None = None,
        navigator: Navigator | None = None,
    ) -> None:
        self.durable: TokenStorage = durable if durable is not None else MemoryStorage()
        self.session: TokenStorage = session if session is not None else MemoryStorage()
        self.navigator = navigator if navigator is not None else Navigator()

    # ------------------------------------------------------------------
    # Token
    # ------------------------------------------------------------------

    @property
    def token(self) -> str:
        """Stored bearer token, durable storage first; empty when absent."""
        return self.durable.get(TOKEN_KEY) or self.session.get(TOKEN_KEY) or ""

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def store_token(self, token: str, *, remember: bool = False) -> None:
        target = self.durable if remember else self.session
        target.set(TOKEN_KEY, token)

    def clear_tokens(self) -> None:
        self.durable.remove(TOKEN_KEY)
        self.session.remove(TOKEN_KEY)

    def auth_user_id(self) -> int | None:
        """User id carried in the token's JWT payload, if any."""
        token = self.token
        if not token:
            return None
        payload = decode_jwt_payload(token)
        if payload is None:
            return None
        for key in ("id", "userId", "sub", "uid"):
            candidate = payload.get(key)
            if candidate is None:
                continue
            number = safe_float(candidate)
            return int(number) if number is not None else None
        return None

    # ------------------------------------------------------------------
    # Theme
    # ------------------------------------------------------------------

    @property
    def theme(self) -> Theme:
        return "dark" if self.durable.get(THEME_KEY) == "dark" else "light"

    def set_theme(self, theme: Theme) -> None:
        if theme not in ("light", "dark"):
            raise ValueError(f"theme must be 'light' or 'dark', got {theme!r}")
        self.durable.set(THEME_KEY, theme)

    def toggle_theme(self) -> Theme:
        new_theme: Theme = "light" if self.theme == "dark" else "dark"
        self.set_theme(new_theme)
        return new_theme
