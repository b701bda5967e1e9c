"""
Recency normalization.

Providers report posting dates as ISO strings, Unix seconds, Unix milliseconds
or free-form dates ("October 10, 2025"). Everything is reduced to milliseconds
since the epoch, then to an age bucket "<n>d". Unknown dates are represented by
NaN / "" and are never excluded by the recency window.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any

from dateutil import parser as date_parser

DAY_MS = 24 * 60 * 60 * 1000

# Values below this are Unix seconds, at or above it Unix milliseconds
_SECONDS_CUTOFF = 1e10

_BUCKET_RE = re.compile(r"^(\d+)d$")
_FREEFORM_HINT_RE = re.compile(r"[A-Za-z/]")

# Two unrelated fallbacks: a free-form date is only accepted when it parses the
# same against both, i.e. it carries its own year, month and day
_FILL_A = datetime(2000, 1, 1)
_FILL_B = datetime(2001, 2, 2)


def _to_ms(dt: datetime) -> float:
    # Naive values are read as UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp() * 1000.0


def _parse_iso(s: str) -> datetime | None:
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        return None


def _parse_freeform(s: str) -> datetime | None:
    try:
        first = date_parser.parse(s, default=_FILL_A)
        second = date_parser.parse(s, default=_FILL_B)
    except (ValueError, OverflowError):
        return None
    return first if first == second else None


def parse_timestamp(raw: Any) -> float:
    """
    Return milliseconds since the epoch, or NaN if `raw` is not a usable date.
    NaN is a normal result; callers check it with math.isnan().
    """
    if raw is None or isinstance(raw, bool):
        return math.nan

    if isinstance(raw, (int, float)):
        ts = float(raw)
        if not math.isfinite(ts):
            return math.nan
        return ts * 1000.0 if ts < _SECONDS_CUTOFF else ts

    if not isinstance(raw, str):
        return math.nan

    s = raw.strip()
    # All-digit strings are neither epochs nor dates here
    if not s or s.isdigit():
        return math.nan

    dt = _parse_iso(s)
    if dt is None and _FREEFORM_HINT_RE.search(s):
        dt = _parse_freeform(s)
    if dt is None:
        return math.nan
    return _to_ms(dt)


def age_bucket(raw: Any, now: datetime | None = None) -> str:
    """
    "<n>d" where n is whole days between the posting date and `now`
    (never negative), or "" when the date is unknown.
    """
    ts = parse_timestamp(raw)
    if math.isnan(ts):
        return ""
    now_ms = _to_ms(now or datetime.now(timezone.utc))
    days = math.floor((now_ms - ts) / DAY_MS)
    return f"{max(days, 0)}d"


def within_window(value: Any, max_days: int) -> bool:
    """
    True unless `value` is an explicit "<n>d" bucket older than `max_days`.
    Missing or unrecognized values pass.
    """
    if value is None or value == "" or value == "-":
        return True
    match = _BUCKET_RE.match(str(value))
    if not match:
        return True
    return int(match.group(1)) <= max_days
