from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Provider(str, Enum):
    """Seed-list provider kinds. `direct` entries name a company careers portal."""

    GREENHOUSE = "greenhouse"
    LEVER = "lever"
    ASHBY = "ashby"
    WORKABLE = "workable"
    SMARTRECRUITERS = "smartrecruiters"
    DIRECT = "direct"


@dataclass(frozen=True)
class CompanySource:
    """
    One seed-list entry.
    - name: canonical display name; overrides whatever the vendor calls itself
    - provider: raw provider string from the seed list (validated by the engine)
    - identifier: board slug for ATS providers, portal name for 'direct'
    """

    name: str
    provider: str
    identifier: str

    @property
    def label(self) -> str:
        return f"{self.provider}:{self.identifier}"


@dataclass(frozen=True)
class MappedPosting:
    """
    A vendor record mapped onto the shared shape, before the engine applies the
    canonical company name and the age bucket.
    """

    id: str
    title: str
    location: str
    apply_url: str
    description: str
    company: str
    source: str
    posted_at: Any = None


@dataclass(frozen=True)
class Posting:
    """A kept posting. Dedupe key is `id + apply_url`."""

    id: str
    title: str
    location: str
    apply_url: str
    description: str
    company: str
    source: str
    posted_at: Any = None
    age_bucket: str = ""

    @property
    def dedupe_key(self) -> str:
        return self.id + self.apply_url

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "location": self.location,
            "applyUrl": self.apply_url,
            "description": self.description,
            "company": self.company,
            "source": self.source,
        }
        # Unknown values are omitted from the feed rather than written as null
        if self.posted_at not in (None, ""):
            out["postedAt"] = self.posted_at
        if self.age_bucket:
            out["ageBucket"] = self.age_bucket
        return out


@dataclass(frozen=True)
class SourceFailure:
    source: str  # seed-list name or portal name
    label: str  # e.g. "greenhouse:acme"
    error: str


@dataclass(frozen=True)
class ConfigurationGap:
    source: str
    reason: str


@dataclass
class ResultSet:
    """
    Output of one pipeline run. Recreated on every run.
    - postings: final, sorted postings
    - failures / gaps: per-source problems that degraded the run (not fatal)
    """

    generated_at: datetime
    postings: list[Posting] = field(default_factory=list)
    failures: list[SourceFailure] = field(default_factory=list)
    gaps: list[ConfigurationGap] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.postings)
