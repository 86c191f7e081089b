from __future__ import annotations

import pytest

from trackmykid.pages.filtering import filter_rows, haystack_text, matches
from trackmykid.pages.listing import parse_list_response, read_total


def test_bare_array_is_one_page() -> None:
    result = parse_list_response([{"id": 1}, {"id": 2}], per_page=10)
    assert result.rows == [{"id": 1}, {"id": 2}]
    assert result.total_pages == 1


def test_reported_total_pages_wins_over_total() -> None:
    result = parse_list_response({"data": [{"id": 1}], "totalPages": 7, "total": 3}, per_page=10)
    assert result.total_pages == 7


@pytest.mark.parametrize(
    ("response", "expected"),
    [
        ({"data": [], "total": 25}, 3),
        ({"data": [], "count": 10}, 1),
        ({"items": [], "meta": {"totalItems": 31}}, 4),
        ({"items": [], "pagination": {"totalPages": "5"}}, 5),
        ({"data": [], "total": 0}, 1),
        ({"data": []}, 1),
    ],
)
def test_envelope_page_count(response: dict[str, object], expected: int) -> None:
    assert parse_list_response(response, per_page=10).total_pages == expected


def test_envelope_rows_trimmed_to_page_size() -> None:
    rows = [{"id": i} for i in range(8)]
    result = parse_list_response({"items": rows}, per_page=3)
    assert [r["id"] for r in result.rows] == [0, 1, 2]


def test_unexpected_shapes_yield_empty_result() -> None:
    for response in (None, "oops", 42, {"data": "nope"}):
        result = parse_list_response(response, per_page=10)
        assert result.rows == []
        assert result.total_pages == 1


def test_read_total_lookup_order() -> None:
    assert read_total({"total": 12, "data": [1, 2]}) == 12
    assert read_total({"meta": {"totalCount": "9"}}) == 9
    assert read_total({"data": {"totalRecords": 4}}) == 4
    assert read_total({"stats": {"count": 2}}) == 2
    assert read_total([1, 2, 3]) == 3
    assert read_total({"items": [1]}) == 1
    assert read_total(None) == 0
    assert read_total("x") == 0


def test_haystack_skips_missing_parts() -> None:
    assert haystack_text(["Alpha", None, "", 42, "OPS@Alpha.test"]) == "alpha 42 ops@alpha.test"


def test_filter_is_case_insensitive_and_trimmed() -> None:
    rows = ["Alpha Corp", "Beta Ltd", "alphabet soup"]
    assert filter_rows(rows, "  ALPHA ", lambda r: [r]) == ["Alpha Corp", "alphabet soup"]
    assert filter_rows(rows, "", lambda r: [r]) == rows
    assert matches(["x"], "   ")
    assert not matches(["Beta"], "gamma")
