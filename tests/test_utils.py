"""Utility function tests"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from promptor.utils import canonicalify, ensure_path, format_datetime, parse_assignment, to_text


def test_to_text():
    assert to_text(None) == ""
    assert to_text("") == ""
    assert to_text("Ada") == "Ada"
    assert to_text(42) == "42"
    assert to_text(1.5) == "1.5"


def test_parse_assignment():
    assert parse_assignment("name=Ada") == ("name", "Ada")
    assert parse_assignment("expr=a=b") == ("expr", "a=b")
    assert parse_assignment("empty=") == ("empty", "")


def test_parse_assignment_requires_equals():
    with pytest.raises(ValueError):
        parse_assignment("name")


def test_ensure_path_creates_directory(tmp_path):
    path = ensure_path(tmp_path / "a" / "b")
    assert path.is_dir()
    assert path == canonicalify(tmp_path / "a" / "b")


def test_format_datetime_converts_timezone():
    dt = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert format_datetime(dt, ZoneInfo("Asia/Shanghai")) == "2026-01-01 20:00:00"


def test_format_datetime_treats_naive_as_utc():
    dt = datetime(2026, 1, 1, 12, 0)
    assert format_datetime(dt, ZoneInfo("Europe/Berlin"), "%H:%M") == "13:00"


def test_format_datetime_parses_strings():
    tz = ZoneInfo("UTC")
    assert format_datetime("2026-01-01 12:00:00+00:00", tz) == "2026-01-01 12:00:00"
    assert format_datetime("not a date", tz) == "not a date"
    assert format_datetime(None, tz) == ""
