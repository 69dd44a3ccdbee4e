"""Coercion helpers shared by the row validators and transformers.

Every helper takes the raw cell string (or None) and either returns a typed
value or None when the text cannot be interpreted.
"""

import re
from datetime import date, datetime
from typing import Optional

TRUE_WORDS = {"true", "yes", "y", "1"}
FALSE_WORDS = {"false", "no", "n", "0"}

DATE_FORMATS = ["%Y-%m-%d", "%m/%d/%Y", "%Y/%m/%d", "%d.%m.%Y", "%b %d %Y", "%B %d %Y"]
DATETIME_FORMATS = ["%m/%d/%Y %H:%M", "%m/%d/%Y %H:%M:%S", "%Y-%m-%d %H:%M"]

INTEGER_PATTERN = re.compile(r"[+-]?\d+", re.ASCII)


def clean(value: Optional[str]) -> Optional[str]:
    """Strip whitespace; empty strings become None."""
    if value is None:
        return None
    s = str(value).strip()
    return s if s else None


def is_blank(value: Optional[str]) -> bool:
    return clean(value) is None


def parse_int(value: Optional[str]) -> Optional[int]:
    s = clean(value)
    if s is None or not INTEGER_PATTERN.fullmatch(s):
        return None
    return int(s)


def parse_bool(value: Optional[str]) -> Optional[bool]:
    s = clean(value)
    if s is None:
        return None
    s = s.lower()
    if s in TRUE_WORDS:
        return True
    if s in FALSE_WORDS:
        return False
    return None


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a calendar date in one of the accepted spellings."""
    s = clean(value)
    if s is None:
        return None
    try:
        return datetime.fromisoformat(s).date()
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; a bare date means midnight."""
    s = clean(value)
    if s is None:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        pass
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    d = parse_date(s)
    if d is not None:
        return datetime(d.year, d.month, d.day)
    return None
