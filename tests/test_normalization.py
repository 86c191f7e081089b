from __future__ import annotations

from datetime import UTC, datetime

from trackmykid.normalize import optional_str, parse_timestamp, safe_float, safe_int, safe_str


def test_safe_float_rejects_non_numbers() -> None:
    assert safe_float("12.5") == 12.5
    assert safe_float(0) == 0.0
    assert safe_float("") is None
    assert safe_float(True) is None
    assert safe_float("nan") is None
    assert safe_float("inf") is None
    assert safe_float([1]) is None


def test_safe_int_truncates() -> None:
    assert safe_int("7") == 7
    assert safe_int(3.9) == 3
    assert safe_int("x") is None


def test_safe_str() -> None:
    assert safe_str(None) == ""
    assert safe_str(False) == "false"
    assert safe_str(12) == "12"
    assert safe_str({"a": [1, 2]}) == '{"a":[1,2]}'
    assert optional_str("") is None
    assert optional_str(0) == "0"


def test_parse_timestamp_iso_with_z() -> None:
    assert parse_timestamp("2024-01-02T03:04:05Z") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)


def test_parse_timestamp_naive_is_utc() -> None:
    assert parse_timestamp("2024-01-02T03:04:05") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)


def test_parse_timestamp_epoch_seconds_and_milliseconds() -> None:
    expected = datetime.fromtimestamp(1_770_928_447, tz=UTC)
    assert parse_timestamp(1_770_928_447) == expected
    assert parse_timestamp(1_770_928_447_000) == expected
    assert parse_timestamp("1770928447") == expected


def test_parse_timestamp_garbage() -> None:
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp("") is None
    assert parse_timestamp(None) is None
    assert parse_timestamp({"ts": 1}) is None
