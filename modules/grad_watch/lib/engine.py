"""
Aggregation pipeline for grad_watch.

Features:
  - Parallel fetch, one task per seed-list source; results merged in seed order
  - Region + seniority filtering on every mapped posting
  - Direct company portals merged afterwards with id+url dedupe (first wins)
  - Recency window over the whole result set, then a stable (company, title) sort
  - Per-source failures and configuration gaps are logged and recorded, never raised
  - Dependency injection for testability (`get_adapter`, `get_portal`)
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone

from . import logging_bridge
from .classify import is_target_region, is_target_seniority
from .config import Settings
from .models import CompanySource, ConfigurationGap, MappedPosting, Posting, Provider, ResultSet, SourceFailure
from .providers.base import BaseAdapter
from .recency import age_bucket, within_window

AdapterLookup = Callable[[str], type[BaseAdapter]]

_COMPONENT = "grad_watch.engine"


# =============================================================================
# DEFAULT ADAPTER LOOKUP (PRODUCTION)
# =============================================================================
def _default_get_adapter(provider: str) -> type[BaseAdapter]:
    from .providers import registry

    return registry.get(provider)


def _default_get_portal(name: str) -> type[BaseAdapter]:
    from .providers import registry

    return registry.get_portal(name)


# =============================================================================
# MAIN ORCHESTRATOR
# =============================================================================
def run_once(
    settings: Settings,
    companies: Sequence[CompanySource] | None = None,
    *,
    get_adapter: AdapterLookup | None = None,
    get_portal: AdapterLookup | None = None,
    now: datetime | None = None,
) -> ResultSet:
    """
    Run one complete fetch/filter/dedupe/sort cycle.

    Args:
        settings: Filters, thresholds, portals and thread count.
        companies: Seed list; defaults to settings.seed_list().
        get_adapter: Optional override resolving a provider to an adapter class (tests).
        get_portal: Optional override resolving a direct portal name to an adapter class (tests).
        now: Reference time for age buckets; defaults to the current UTC time.

    Returns:
        ResultSet with the final sorted postings plus any failures/gaps.
    """
    start_ns = time.perf_counter_ns()
    now = now or datetime.now(timezone.utc)
    get_adapter_func = get_adapter or _default_get_adapter
    get_portal_func = get_portal or _default_get_portal

    if companies is None:
        companies = settings.seed_list().companies

    result = ResultSet(generated_at=now)

    if settings.skip_network:
        logging_bridge.activity({
            "component": _COMPONENT,
            "op": "skipped",
            "reason": "skip_network",
            "source_count": len(companies),
        })
        return result

    # -------------------------------------------------------------------------
    # RESOLVE ADAPTERS (configuration gaps are skipped, not raised)
    # -------------------------------------------------------------------------
    planned: list[tuple[CompanySource, type[BaseAdapter]]] = []
    portals: list[str] = list(settings.direct_portals)
    for src in companies:
        if not src.provider or not src.identifier:
            missing = "provider" if not src.provider else "identifier"
            _record_gap(result, src.name or src.label, f"missing {missing}")
            continue
        if src.provider == Provider.DIRECT.value:
            portals.append(src.identifier.lower())
            continue
        try:
            planned.append((src, get_adapter_func(src.provider)))
        except KeyError:
            _record_gap(result, src.name, f"no adapter for provider {src.provider!r}")

    # -------------------------------------------------------------------------
    # FETCH SEED-LIST SOURCES IN PARALLEL (collected per index, merged in order)
    # -------------------------------------------------------------------------
    fetched: dict[int, list[MappedPosting]] = {}
    durations_us: dict[str, int] = {}

    def _run_source(src: CompanySource, adapter_cls: type[BaseAdapter]) -> tuple[list[MappedPosting], int]:
        t0 = time.perf_counter_ns()
        adapter = adapter_cls()
        try:
            items = adapter.fetch(src.identifier)
        finally:
            adapter.close()
        return items, int((time.perf_counter_ns() - t0) // 1000)

    if planned:
        workers = min(len(planned), settings.max_threads)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(_run_source, src, cls): idx for idx, (src, cls) in enumerate(planned)}
            for fut in as_completed(futures):
                idx = futures[fut]
                src = planned[idx][0]
                try:
                    items, dt_us = fut.result()
                except Exception as e:
                    _record_failure(result, src.name, src.label, e)
                    continue
                fetched[idx] = items
                durations_us[src.label] = dt_us

    # -------------------------------------------------------------------------
    # FILTER + NORMALIZE (company is always the seed-list name)
    # -------------------------------------------------------------------------
    postings: list[Posting] = []
    found_by_source: dict[str, int] = {}
    kept_by_source: dict[str, int] = {}
    for idx, (src, _cls) in enumerate(planned):
        if idx not in fetched:
            continue
        items = fetched[idx]
        kept = [
            _to_posting(m, company=src.name, now=now)
            for m in items
            if _is_relevant(m, settings) and (m.id or m.apply_url)
        ]
        found_by_source[src.name] = len(items)
        kept_by_source[src.name] = len(kept)
        postings.extend(kept)

    # -------------------------------------------------------------------------
    # DIRECT PORTALS (best effort, merged with id+url dedupe)
    # -------------------------------------------------------------------------
    seen = {p.dedupe_key for p in postings}
    for name in _unique(portals):
        try:
            portal_cls = get_portal_func(name)
        except KeyError:
            _record_gap(result, name, "no direct portal registered")
            continue

        t0 = time.perf_counter_ns()
        adapter = portal_cls()
        try:
            items = adapter.fetch(name)
        except Exception as e:
            _record_failure(result, name, f"{Provider.DIRECT.value}:{name}", e)
            continue
        finally:
            adapter.close()
        durations_us[f"{Provider.DIRECT.value}:{name}"] = int((time.perf_counter_ns() - t0) // 1000)

        added = 0
        for m in items:
            if not _is_relevant(m, settings) or not (m.id or m.apply_url):
                continue
            candidate = _to_posting(m, company=m.company, now=now)
            if candidate.dedupe_key in seen:
                continue
            seen.add(candidate.dedupe_key)
            postings.append(candidate)
            added += 1
        found_by_source[name] = len(items)
        kept_by_source[name] = added

    # -------------------------------------------------------------------------
    # RECENCY WINDOW (unknown age passes) + STABLE SORT
    # -------------------------------------------------------------------------
    windowed = [p for p in postings if within_window(p.age_bucket or p.posted_at, settings.max_age_days)]
    result.postings = sorted(windowed, key=lambda p: (p.company, p.title))

    total_us = int((time.perf_counter_ns() - start_ns) // 1000)
    logging_bridge.activity({
        "component": _COMPONENT,
        "op": "summary",
        "found_by_source": found_by_source,
        "kept_by_source": kept_by_source,
        "dropped_by_window": len(postings) - len(windowed),
        "count": result.count,
        "failures": [f.label for f in result.failures],
        "gaps": [g.source for g in result.gaps],
        "max_age_days": settings.max_age_days,
        "durations_us": durations_us,
        "total_us": total_us,
    })
    return result


# =============================================================================
# HELPERS
# =============================================================================
def _is_relevant(m: MappedPosting, settings: Settings) -> bool:
    return is_target_region(m.location, settings.region_keywords) and is_target_seniority(
        m.title, m.description, settings.seniority_keywords
    )


def _to_posting(m: MappedPosting, *, company: str, now: datetime) -> Posting:
    return Posting(
        id=m.id,
        title=m.title,
        location=m.location,
        apply_url=m.apply_url,
        description=m.description,
        company=company,
        source=m.source,
        posted_at=m.posted_at,
        age_bucket=age_bucket(m.posted_at, now),
    )


def _unique(names: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for n in names:
        if n and n not in seen:
            seen.add(n)
            out.append(n)
    return out


def _record_gap(result: ResultSet, source: str, reason: str) -> None:
    result.gaps.append(ConfigurationGap(source=source, reason=reason))
    logging_bridge.activity({
        "component": _COMPONENT,
        "op": "config_gap",
        "source": source,
        "reason": reason,
    })


def _record_failure(result: ResultSet, source: str, label: str, exc: Exception) -> None:
    result.failures.append(SourceFailure(source=source, label=label, error=str(exc) or repr(exc)))
    logging_bridge.error({
        "component": _COMPONENT,
        "op": "fetch",
        "source": source,
        "label": label,
        "error": repr(exc),
    })
