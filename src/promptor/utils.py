"""Utility functions for Promptor application"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)


def canonicalify(p: Path | str) -> Path:
    return Path(p).expanduser().resolve()


def ensure_path(p: Path | str) -> Path:
    path = canonicalify(p)
    path.mkdir(parents=True, exist_ok=True)
    return path


def to_text(value: Any) -> str:
    """Coerce a form value into the text inserted into a template.

    Examples:
        >>> to_text("Ada")
        'Ada'
        >>> to_text(None)
        ''
        >>> to_text(3)
        '3'
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def parse_assignment(raw: str) -> tuple[str, str]:
    """Split a ``ref=value`` command line assignment.

    Only the first ``=`` separates the ref, so values may contain ``=``.

    Raises:
        ValueError: If no ``=`` is present
    """
    if "=" not in raw:
        raise ValueError(f"Expected ref=value, got: {raw}")
    ref, value = raw.split("=", 1)
    return ref, value


def format_datetime(dt, timezone, format_str: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Format a stored timestamp in the given timezone.

    Accepts datetimes or ISO strings (SQLite hands back either), returns an
    empty string for ``None`` and the raw value when it cannot be parsed.
    """
    if dt is None:
        return ""
    if isinstance(dt, datetime):
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=ZoneInfo("UTC"))
        return dt.astimezone(timezone).strftime(format_str)
    if isinstance(dt, str):
        try:
            parsed = datetime.fromisoformat(dt)
        except ValueError:
            return dt
        return format_datetime(parsed, timezone, format_str)
    return str(dt)
