"""Lenient number parsing for loosely typed upstream fields.

Nothing here raises: anything that does not parse to a finite number
becomes ``None`` (never ``0``).
"""
import math
import re
from typing import Any, Optional, Union

Number = Union[int, float]

_NOT_AVAILABLE = "N/A"
_FIRST_NUMBER_RE = re.compile(r"(\d+(?:\.\d+)?)")


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_number(text: str) -> Optional[Number]:
    try:
        n = float(text)
    except ValueError:
        return None
    if not math.isfinite(n):
        return None
    return int(n) if n.is_integer() else n


def parse_votes(value: Any) -> Optional[Number]:
    """Vote counts: ``42`` → 42, ``"12,345"`` → 12345, ``"abc"``/None → None."""
    if is_number(value):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        return _to_number(value.replace(",", "").strip())
    return None


def parse_rating(value: Any) -> Optional[float]:
    """Ratings: numeric or numeric string → float; ``"N/A"``, junk or None → None."""
    if is_number(value):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not text or text == _NOT_AVAILABLE:
            return None
        n = _to_number(text)
        return float(n) if n is not None else None
    return None


def parse_score_0_100(value: Any) -> Optional[Number]:
    """First number in a score string: ``"93%"`` → 93, ``"71/100"`` → 71."""
    if not isinstance(value, str) or value.strip() in ("", _NOT_AVAILABLE):
        return None
    match = _FIRST_NUMBER_RE.search(value)
    if not match:
        return None
    return _to_number(match.group(1))


def parse_episode_number(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    n = parse_votes(value)
    if n is None or (isinstance(n, float) and not n.is_integer()):
        return None
    return int(n)
