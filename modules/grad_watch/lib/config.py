from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .classify import REGION_KEYWORDS, SENIORITY_KEYWORDS
from .models import CompanySource
from .utils import getenv_str, split_list, truthy

DEFAULT_COMPANIES_PATH = "data/companies.json"
DEFAULT_EXAMPLE_COMPANIES_PATH = "data/companies.example.json"
DEFAULT_MAX_AGE_DAYS = 3
DEFAULT_DIRECT_PORTALS = ("amazon", "microsoft")


# -----------------------------
# Exceptions
# -----------------------------
class ConfigError(ValueError):
    """Raised when provided kwargs/env cannot form a valid Settings, or the seed list cannot be loaded."""


# -----------------------------
# Models
# -----------------------------
@dataclass(frozen=True)
class SeedList:
    companies: list[CompanySource]
    path: str
    used_example: bool = False


@dataclass
class Settings:
    """
    Canonical configuration for a 'grad_watch' run.

    Precedence for every field: kwargs, then environment, then defaults.
    Keyword lists and the age threshold are threaded into the engine; there is
    no process-wide mutable state.
    """

    # Seed list
    companies_path: str = DEFAULT_COMPANIES_PATH
    example_companies_path: str | None = DEFAULT_EXAMPLE_COMPANIES_PATH

    # Filters
    region_keywords: tuple[str, ...] = REGION_KEYWORDS
    seniority_keywords: tuple[str, ...] = SENIORITY_KEYWORDS
    max_age_days: int = DEFAULT_MAX_AGE_DAYS

    # Direct company portals run after the seed list
    direct_portals: tuple[str, ...] = DEFAULT_DIRECT_PORTALS

    # Runtime behavior
    max_threads: int = 8
    skip_network: bool = False

    _seed: SeedList | None = field(default=None, repr=False, compare=False)

    # ------------- convenience -------------
    def seed_list(self) -> SeedList:
        """Load (once) and return the seed list for this run."""
        if self._seed is None:
            self._seed = load_companies(self.companies_path, self.example_companies_path)
        return self._seed

    # ------------- constructors -------------
    @classmethod
    def from_env_and_kwargs(cls, kwargs: Mapping[str, Any] | None) -> Settings:
        """
        Build Settings from kwargs with validation.

        Expected kwargs (all optional):

            companies_path: str          # env GRAD_WATCH_COMPANIES
            example_companies_path: str  # fallback seed list ("" disables)
            region_keywords: list|str    # env GRAD_WATCH_REGION_KEYWORDS (comma-separated)
            seniority_keywords: list|str # env GRAD_WATCH_SENIORITY_KEYWORDS
            max_age_days: int = 3        # env GRAD_WATCH_MAX_DAYS
            direct_portals: list|str     # env GRAD_WATCH_DIRECT_PORTALS ("" disables)
            max_threads: int = 8
            skip_network: bool = false
        """
        kw = dict(kwargs or {})

        companies_path = str(
            kw.get("companies_path") or getenv_str("GRAD_WATCH_COMPANIES") or DEFAULT_COMPANIES_PATH
        ).strip()

        example_path: str | None = DEFAULT_EXAMPLE_COMPANIES_PATH
        if "example_companies_path" in kw:
            example_path = str(kw.get("example_companies_path") or "").strip() or None

        region = _keywords(kw, "region_keywords", "GRAD_WATCH_REGION_KEYWORDS", REGION_KEYWORDS)
        seniority = _keywords(kw, "seniority_keywords", "GRAD_WATCH_SENIORITY_KEYWORDS", SENIORITY_KEYWORDS)

        raw_days = kw.get("max_age_days")
        if raw_days is None:
            raw_days = getenv_str("GRAD_WATCH_MAX_DAYS", str(DEFAULT_MAX_AGE_DAYS))
        try:
            max_age_days = int(raw_days)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"'max_age_days' must be an integer (got {raw_days!r}).") from e

        if "direct_portals" in kw:
            portals = split_list(kw.get("direct_portals"))
        else:
            env_portals = os.getenv("GRAD_WATCH_DIRECT_PORTALS")
            portals = split_list(env_portals) if env_portals is not None else list(DEFAULT_DIRECT_PORTALS)

        try:
            raw_threads = kw.get("max_threads")
            max_threads = 8 if raw_threads is None else int(raw_threads)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"'max_threads' must be an integer (got {kw.get('max_threads')!r}).") from e

        settings = cls(
            companies_path=companies_path,
            example_companies_path=example_path,
            region_keywords=region,
            seniority_keywords=seniority,
            max_age_days=max_age_days,
            direct_portals=tuple(p.lower() for p in portals),
            max_threads=max_threads,
            skip_network=truthy(kw.get("skip_network")),
        )
        _validate_settings(settings)
        return settings


# -----------------------------
# Seed list
# -----------------------------
def load_companies(path: str, example_path: str | None = None) -> SeedList:
    """
    Load the seed list from `path`. When it does not exist, fall back to
    `example_path` and flag the result so callers can tell the user.
    Any failure here is fatal for the run.
    """
    used_example = False
    if not os.path.exists(path):
        if not example_path or not os.path.exists(example_path):
            raise ConfigError(f"grad_watch seed list not found: {path}")
        path, used_example = example_path, True

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"grad_watch seed list is invalid JSON: {path}") from e
    except OSError as e:
        raise ConfigError(f"grad_watch seed list could not be read: {path}: {e}") from e

    return SeedList(companies=parse_companies(data), path=path, used_example=used_example)


def parse_companies(value: Any) -> list[CompanySource]:
    """
    Parse the seed list. Accepts, per item:
      {"name": "...", "ats": {"type": "greenhouse", "slug": "acme"}}
      {"name": "...", "provider": "greenhouse", "identifier": "acme"}

    Missing provider/identifier are kept as "" so the engine can report the gap.
    """
    if not isinstance(value, list):
        raise ConfigError("Seed list must be a JSON array of company objects.")
    out: list[CompanySource] = []
    for i, item in enumerate(value):
        if not isinstance(item, dict):
            raise ConfigError(f"Seed list item[{i}] must be an object.")
        ats = item.get("ats")
        if ats is not None and not isinstance(ats, dict):
            raise ConfigError(f"Seed list item[{i}].ats must be an object.")
        ats = ats or {}
        provider = ats.get("type") or item.get("provider") or ""
        identifier = ats.get("slug") or item.get("identifier") or ""
        name = item.get("name") or identifier
        out.append(
            CompanySource(
                name=str(name).strip(),
                provider=str(provider).strip().lower(),
                identifier=str(identifier).strip(),
            )
        )
    return out


# -----------------------------
# Helpers
# -----------------------------
def _keywords(kw: Mapping[str, Any], key: str, env: str, default: tuple[str, ...]) -> tuple[str, ...]:
    if kw.get(key) is not None:
        words = split_list(kw[key])
    else:
        words = split_list(getenv_str(env)) or list(default)
    return tuple(w.lower() for w in words)


def _validate_settings(s: Settings) -> None:
    if not s.companies_path:
        raise ConfigError("'companies_path' cannot be empty.")
    if not s.region_keywords:
        raise ConfigError("'region_keywords' cannot be empty.")
    if not s.seniority_keywords:
        raise ConfigError("'seniority_keywords' cannot be empty.")
    if s.max_age_days < 0:
        raise ConfigError("'max_age_days' must be >= 0.")
    if s.max_threads <= 0:
        raise ConfigError("'max_threads' must be >= 1.")
