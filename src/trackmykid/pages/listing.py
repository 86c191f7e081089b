"""List response normalization.

The API answers list endpoints either with a bare array (one page, every
row) or with an envelope carrying the rows under ``data`` or ``items``
next to pagination metadata.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from trackmykid.normalize import safe_int

_TOTAL_KEYS: tuple[str, ...] = ("total", "count", "totalCount", "totalItems", "totalRecords")
_TOTAL_CONTAINERS: tuple[str, ...] = ("meta", "pagination", "data", "summary", "stats")
_PAGE_CONTAINERS: tuple[str, ...] = ("meta", "pagination")


@dataclass
class ListResult:
    rows: list[Any] = field(default_factory=list)
    total_pages: int = 1


def _envelope_rows(response: Mapping[str, Any]) -> list[Any]:
    for key in ("data", "items"):
        value = response.get(key)
        if isinstance(value, list):
            return value
    return []


def _first_int(container: Any, keys: tuple[str, ...]) -> int | None:
    if not isinstance(container, Mapping):
        return None
    for key in keys:
        if container.get(key) is not None:
            parsed = safe_int(container[key])
            if parsed is not None:
                return parsed
    return None


def _reported_total_pages(response: Mapping[str, Any], per_page: int) -> int | None:
    pages = _first_int(response, ("totalPages",))
    if pages is None:
        for name in _PAGE_CONTAINERS:
            pages = _first_int(response.get(name), ("totalPages",))
            if pages is not None:
                break
    if pages is not None:
        return pages

    total = _first_int(response, _TOTAL_KEYS)
    if total is None:
        for name in _PAGE_CONTAINERS:
            total = _first_int(response.get(name), _TOTAL_KEYS)
            if total is not None:
                break
    if total is None or per_page <= 0:
        return None
    return math.ceil(total / per_page)


def parse_list_response(response: Any, per_page: int) -> ListResult:
    """Split a list response into the current page's rows and a page count.

    - bare array: its rows, one page
    - envelope: rows from ``data``/``items``; ``totalPages`` as reported,
      else derived from a reported row total, else one page

    Rows beyond *per_page* are dropped and the page count is never below 1.
    """
    if isinstance(response, list):
        rows: list[Any] = response
        total_pages: int | None = 1
    elif isinstance(response, Mapping):
        rows = _envelope_rows(response)
        total_pages = _reported_total_pages(response, per_page)
    else:
        return ListResult()

    if per_page > 0:
        rows = rows[:per_page]
    return ListResult(rows=list(rows), total_pages=max(1, total_pages or 1))


def read_total(response: Any) -> int:
    """Best-effort total row count of a list response.

    Looks for ``total``/``count``/``totalCount``/``totalItems``/``totalRecords``
    at the top level, then under ``meta``/``pagination``/``data``/``summary``/
    ``stats``, and finally falls back to the length of the row list.
    """
    if response is None:
        return 0

    direct = _first_int(response, _TOTAL_KEYS)
    if direct is not None:
        return direct

    if isinstance(response, Mapping):
        for name in _TOTAL_CONTAINERS:
            nested = _first_int(response.get(name), _TOTAL_KEYS)
            if nested is not None:
                return nested

    if isinstance(response, list):
        return len(response)
    if isinstance(response, Mapping):
        return len(_envelope_rows(response))
    return 0
