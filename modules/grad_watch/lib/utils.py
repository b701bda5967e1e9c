from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Any


def truthy(v: Any) -> bool:
    """
    Normalize common truthy inputs from env/kwargs.
    Accepts bools or strings like: '1', 'true', 'yes', 'on'.
    """
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    if isinstance(v, (int, float)):
        return v != 0
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "on", "y", "t"}


def split_list(v: Any) -> list[str]:
    """
    Normalize a keyword list from kwargs/env.
    Accepts a list/tuple of strings or a comma-separated string; blanks dropped.
    """
    if v is None:
        return []
    items = v.split(",") if isinstance(v, str) else list(v)
    return [str(x).strip() for x in items if str(x).strip()]


def iso_z(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a 'Z' suffix."""
    dt = dt.astimezone(timezone.utc) if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def getenv_str(name: str, default: str | None = None) -> str | None:
    """
    Typed wrapper for environment access; empty values count as unset.
    """
    val = os.getenv(name)
    return val if val not in (None, "") else default
