from __future__ import annotations

from collections.abc import Iterable

REGION_KEYWORDS: tuple[str, ...] = (
    "london",
    "city of london",
    "greater london",
    "london, uk",
    "london, united kingdom",
    "gb-london",
)

SENIORITY_KEYWORDS: tuple[str, ...] = (
    "new grad",
    "new graduate",
    "graduate",
    "entry level",
    "junior",
    "early career",
    "jeune diplômé",
    "recent graduate",
    "grad role",
    "graduate program",
    "bac+5",
)

# Title-only filter applied by the direct company portals before returning results
DIRECT_PORTAL_KEYWORDS: tuple[str, ...] = (
    "new grad",
    "graduate",
    "entry level",
    "early career",
    "university",
)


def includes_any(text: str | None, words: Iterable[str]) -> bool:
    """Case-insensitive substring match; not tokenized ("new-london" matches "london")."""
    t = (text or "").lower()
    if not t:
        return False
    return any(w.lower() in t for w in words if w)


def is_target_region(location: str | None, keywords: Iterable[str] = REGION_KEYWORDS) -> bool:
    return includes_any(location, keywords)


def is_target_seniority(
    title: str | None,
    description: str | None,
    keywords: Iterable[str] = SENIORITY_KEYWORDS,
) -> bool:
    words = tuple(keywords)
    return includes_any(title, words) or includes_any(description, words)
