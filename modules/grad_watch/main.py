from __future__ import annotations

from typing import Any

from .lib import render
from .lib.config import Settings
from .lib.engine import run_once as _run_engine
from .lib.logging_bridge import activity as log_activity


def run(**kwargs: Any) -> tuple[str, dict]:
    """
    Entry point for the 'grad_watch' module.

    Accepts kwargs (from the CLI), including:
      companies_path: str = "data/companies.json"
      region_keywords: list[str] | str
      seniority_keywords: list[str] | str
      max_age_days: int = 3
      direct_portals: list[str] | str = "amazon,microsoft"
      max_threads: int = 8
      skip_network: bool = False

    Returns:
      (report_markdown: str, meta: dict) where meta["payload"] is the JSON feed.
      Writing either to disk is the caller's job.
    """
    settings = Settings.from_env_and_kwargs(kwargs)
    seed = settings.seed_list()

    log_activity({
        "component": "grad_watch.main",
        "op": "start",
        "companies_path": seed.path,
        "used_example": seed.used_example,
        "sources": len(seed.companies),
        "direct_portals": list(settings.direct_portals),
        "max_age_days": settings.max_age_days,
        "skip_network": settings.skip_network,
    })

    result = _run_engine(settings, seed.companies)

    payload = render.build_payload(result)
    report = render.wrap_document(
        render.build_table(result.postings),
        generated_at=payload["generatedAt"],
        max_age_days=settings.max_age_days,
        source_label=seed.path,
    )

    meta = {
        "payload": payload,
        "count": result.count,
        "companies_path": seed.path,
        "used_example": seed.used_example,
        "failures": [{"source": f.source, "label": f.label, "error": f.error} for f in result.failures],
        "gaps": [{"source": g.source, "reason": g.reason} for g in result.gaps],
    }
    return report, meta
