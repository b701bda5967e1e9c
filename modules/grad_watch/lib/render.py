from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from . import utils
from .models import Posting, ResultSet

TABLE_HEADER = "| Company | Role | Location | Posted | Link |\n|---|---|---|---|---|"


def build_payload(result: ResultSet) -> dict[str, Any]:
    """JSON-serializable feed: {generatedAt, count, postings}."""
    return {
        "generatedAt": utils.iso_z(result.generated_at),
        "count": result.count,
        "postings": [p.to_dict() for p in result.postings],
    }


def _cell(s: str | None) -> str:
    # Keep each posting on one row and stop stray pipes from splitting columns
    return " ".join((s or "").split()).replace("|", "\\|")


def build_table(postings: Iterable[Posting]) -> str:
    """
    Markdown table, one row per posting:
      Company | Role | Location | Posted | Link
    """
    rows = [
        f"| {_cell(p.company)} | {_cell(p.title)} | {_cell(p.location)} | "
        f"{p.age_bucket or '-'} | [Apply]({p.apply_url}) |"
        for p in postings
    ]
    return "\n".join([TABLE_HEADER, *rows])


def wrap_document(
    table_md: str,
    *,
    generated_at: str,
    max_age_days: int,
    source_label: str = "data/companies.json",
    heading: str = "EU New Grad Roles (auto-generated)",
) -> str:
    """Wrap the table in the README layout: heading, run facts, table."""
    return (
        f"# {heading}\n\n"
        f"- Updated: {generated_at}\n"
        f"- London new-grad roles from the last {max_age_days} days (or unknown date)\n"
        f"- Source: {source_label}\n\n"
        f"{table_md}\n"
    )
