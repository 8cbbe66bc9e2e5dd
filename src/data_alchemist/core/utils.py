"""Core utility functions for Data Alchemist Tools.

This module provides the value-level predicates shared by validation checks and
the remediation classifier.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, List, Optional

from .dataset import is_blank

_NUMBER_RE = re.compile(r"^[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SKILL_SPLIT_RE = re.compile(r"[,;|]")


def parse_number(value: Any) -> Optional[float]:
    """Parse a cell as a plain number.

    Accepts ints, floats and strings that are entirely a decimal number
    (surrounding whitespace allowed). Booleans, blanks and strings with units or
    currency symbols are rejected.

    Examples:
        >>> parse_number(" 42 ")
        42.0
        >>> parse_number("90.5USD") is None
        True
        >>> parse_number(True) is None
        True
    """
    if isinstance(value, bool) or is_blank(value):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and _NUMBER_RE.match(value.strip()):
        return float(value.strip())
    return None


def is_canonical_boolean(value: Any) -> bool:
    """True for real booleans and the strings ``"true"``/``"false"`` (any case)."""
    if isinstance(value, bool):
        return True
    return isinstance(value, str) and value.strip().lower() in ("true", "false")


def parse_iso_date(value: Any) -> Optional[date]:
    """Parse a canonical ``YYYY-MM-DD`` date.

    ``date``/``datetime`` objects are accepted as-is. Any other string layout
    returns None, even if it names a real date.

    Examples:
        >>> parse_iso_date("2024-12-25")
        datetime.date(2024, 12, 25)
        >>> parse_iso_date("2024/12/25") is None
        True
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value.strip()):
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def normalize_key(value: Any) -> str:
    """Normalize an identifier or name for comparison (trimmed, case-folded)."""
    if is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip().casefold()


def parse_skills(value: Any) -> List[str]:
    """Split a skills cell on commas, semicolons or pipes.

    Examples:
        >>> parse_skills("Python, SQL;  ML")
        ['python', 'sql', 'ml']
    """
    if is_blank(value):
        return []
    return [s.strip().lower() for s in _SKILL_SPLIT_RE.split(str(value)) if s.strip()]


__all__ = [
    "is_canonical_boolean",
    "normalize_key",
    "parse_iso_date",
    "parse_number",
    "parse_skills",
]
