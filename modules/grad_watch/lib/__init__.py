# modules/grad_watch/lib/__init__.py
from __future__ import annotations

# Re-export commonly-used types for convenience
from .config import ConfigError, Settings
from .engine import run_once
from .errors import MalformedResponseError, ProviderError, UpstreamError
from .models import CompanySource, Posting, Provider, ResultSet

# Importing the providers package registers every built-in adapter
from . import providers as _providers  # noqa: E402,F401

__all__ = [
    "CompanySource",
    "ConfigError",
    "MalformedResponseError",
    "Posting",
    "Provider",
    "ProviderError",
    "ResultSet",
    "Settings",
    "UpstreamError",
    "run_once",
]
