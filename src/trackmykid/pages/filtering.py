"""Client-side fallback filter.

Servers are asked to filter with ``q``; this second pass only narrows the
rows already fetched for the current page.  It never finds rows that live
on other pages and must not be mistaken for a full-dataset search.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar

from trackmykid.normalize import safe_str

R = TypeVar("R")


def haystack_text(parts: Iterable[Any]) -> str:
    """Join the non-empty display fields of a row into one lowercase string."""
    return " ".join(safe_str(part) for part in parts if part is not None and part != "").lower()


def matches(parts: Iterable[Any], query: str) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    return needle in haystack_text(parts)


def filter_rows(rows: Sequence[R], query: str, haystack: Callable[[R], Iterable[Any]]) -> list[R]:
    """Rows whose haystack contains *query*, case-insensitively."""
    if not query.strip():
        return list(rows)
    return [row for row in rows if matches(haystack(row), query)]
