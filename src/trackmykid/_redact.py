"""Scrub credentials from values before they reach DEBUG logs.

Login bodies carry passwords, every request carries a bearer token, and
error responses sometimes echo the token back inside a message string.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

REDACTED = "<redacted>"

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "token",
        "accesstoken",
        "refreshtoken",
        "authorization",
        "cookie",
        "simnumber",
    }
)

_BEARER_RE = re.compile(r"(?i)\bbearer\s+[\w.~+/=-]+")
_JWT_RE = re.compile(r"\beyJ[\w-]*\.[\w-]+\.[\w-]*")

_MAX_DEPTH = 20


def _is_sensitive(key: Any) -> bool:
    return str(key).replace("_", "").replace("-", "").lower() in _SENSITIVE_KEYS


def scrub_text(text: str, *, max_string: int = 512) -> str:
    """Mask bearer tokens and JWTs inside *text* and cap its length."""
    text = _BEARER_RE.sub(f"Bearer {REDACTED}", text)
    text = _JWT_RE.sub(REDACTED, text)
    if len(text) > max_string:
        return f"{text[:max_string]}...<truncated>"
    return text


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* that is safe to log.

    Values under credential keys (``password``, ``token``, ``sim_number``,
    ``Authorization``...) are replaced wholesale; other strings are
    scrubbed with :func:`scrub_text`.
    """
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return scrub_text(value, max_string=max_string)
    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"
    if isinstance(value, Mapping):
        return {
            str(k): REDACTED if _is_sensitive(k) else redact_for_log(v, max_string=max_string, _depth=_depth + 1)
            for k, v in value.items()
        }
    if isinstance(value, Sequence):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]
    return repr(value)
