"""
Value Normalizers

Small pure functions that turn free-text API values into canonical forms:
county names, money amounts, joined addresses and display dates.
"""
import re
from datetime import datetime
from typing import Any, Optional

_WHITESPACE = re.compile(r"\s+")
_STATE_SUFFIX = re.compile(r"\s*,\s*TX$")
_COUNTY_SUFFIX = re.compile(r"\s*COUNTY\s*$", re.IGNORECASE)
_NON_NUMERIC = re.compile(r"[^0-9.]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def normalize_county_name(raw: Optional[str]) -> str:
    """
    Canonical county name: upper case, single spaced, no ", TX", ends in " COUNTY".

    Examples:
        "travis, tx"     -> "TRAVIS COUNTY"
        "Travis County"  -> "TRAVIS COUNTY"
        ""               -> ""
    """
    if not raw:
        return ""

    upper = _WHITESPACE.sub(" ", str(raw).strip().upper())
    name = _STATE_SUFFIX.sub("", upper).strip()
    if not name:
        return ""
    if name.endswith(" COUNTY"):
        return name
    return f"{name} COUNTY"


def county_search_name(county: str) -> str:
    """Lower-case county name without the COUNTY suffix ("JIM WELLS COUNTY" -> "jim wells")."""
    return _COUNTY_SUFFIX.sub("", county or "").strip().lower()


def parse_amount(value: Any) -> float:
    """
    Parse a money-like value ("$1,200.50", 500, "abc") into a float.

    Anything without digits is treated as 0.
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)

    cleaned = _NON_NUMERIC.sub("", str(value))
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def join_address_parts(*parts: Optional[str]) -> str:
    """Join non-empty address parts with ", "."""
    return ", ".join(str(p).strip() for p in parts if p is not None and str(p).strip())


def format_sale_date(value: Optional[str]) -> str:
    """
    Render an ISO sale date as "Month D, YYYY".

    Empty values and the "unknown" placeholder become ""; unparseable values
    are passed through unchanged.
    """
    if not value or value == "unknown":
        return ""
    try:
        parsed = datetime.strptime(str(value)[:10], "%Y-%m-%d")
    except ValueError:
        return str(value)
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"
