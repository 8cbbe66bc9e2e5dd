"""Value coercion used to compute safe corrections.

Every function returns None when no unambiguous corrected value exists. Callers
treat None as "send to manual review", never as a value to write.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Iterable, Optional, Union

from data_alchemist.core.dataset import is_blank
from data_alchemist.core.utils import normalize_key
from .config import (
    CANONICAL_DATE_FORMAT,
    DATE_INPUT_FORMATS,
    DUPLICATE_SUFFIX_WIDTH,
    FALSY_TOKENS,
    TRUTHY_TOKENS,
)

# Optional sign or currency symbol, then digits with optional thousands separators
_LEADING_NUMBER_RE = re.compile(
    r"^\s*(?:[$€£¥]\s*)?(?P<number>[-+]?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?|[-+]?\.\d+)"
)


def leading_number(value: Any) -> Optional[Union[int, float]]:
    """Extract the leading numeric token of a cell.

    Integers stay ``int``; anything with a decimal part becomes ``float``.

    Examples:
        >>> leading_number("90.5USD")
        90.5
        >>> leading_number("$1,200/hr")
        1200
        >>> leading_number("about 40") is None
        True
    """
    if isinstance(value, bool) or is_blank(value):
        return None
    if isinstance(value, (int, float)):
        return value
    match = _LEADING_NUMBER_RE.match(str(value))
    if not match:
        return None
    token = match.group("number").replace(",", "")
    if "." in token:
        return float(token)
    return int(token)


def coerce_boolean(value: Any) -> Optional[bool]:
    """Map common truthy/falsy tokens to a boolean.

    Examples:
        >>> coerce_boolean("Yes")
        True
        >>> coerce_boolean(0)
        False
        >>> coerce_boolean("maybe") is None
        True
    """
    if isinstance(value, bool):
        return value
    if is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    token = str(value).strip().lower()
    if token in TRUTHY_TOKENS:
        return True
    if token in FALSY_TOKENS:
        return False
    return None


def coerce_date(value: Any) -> Optional[str]:
    """Reformat a recognizable date to ``YYYY-MM-DD``.

    Examples:
        >>> coerce_date("2024/12/25")
        '2024-12-25'
        >>> coerce_date("Dec 25, 2024")
        '2024-12-25'
        >>> coerce_date("next tuesday") is None
        True
    """
    if is_blank(value) or isinstance(value, bool):
        return None
    text = str(value).strip()
    for fmt in DATE_INPUT_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.strftime(CANONICAL_DATE_FORMAT)
    return None


def next_unique_suffix(value: Any, existing_values: Iterable[Any]) -> str:
    """Append the smallest numeric suffix that makes ``value`` unique.

    Comparison is trimmed and case-insensitive, matching how duplicates are
    detected.

    Args:
        value: The colliding value.
        existing_values: Every value currently in use in the column.

    Returns:
        ``"<value>_NNN"`` with NNN starting at 001.

    Examples:
        >>> next_unique_suffix("John Doe", ["John Doe", "John Doe_001"])
        'John Doe_002'
    """
    base = str(value).strip()
    taken = {normalize_key(v) for v in existing_values}
    counter = 1
    while True:
        candidate = f"{base}_{counter:0{DUPLICATE_SUFFIX_WIDTH}d}"
        if normalize_key(candidate) not in taken:
            return candidate
        counter += 1
