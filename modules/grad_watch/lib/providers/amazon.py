# modules/grad_watch/lib/providers/amazon.py
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..classify import DIRECT_PORTAL_KEYWORDS, includes_any
from ..http_client import HttpClient
from ..models import MappedPosting, Provider
from .base import BaseAdapter, collection
from .registry import register_portal

log = logging.getLogger(__name__)

_SITE = "https://www.amazon.jobs"


def _location(record: Mapping[str, Any], _identifier: str) -> str:
    parts = [record.get("city"), record.get("state"), record.get("country_code")]
    return ", ".join(str(p) for p in parts if p)


def _job_url(record: Mapping[str, Any], _identifier: str) -> str:
    path = record.get("job_path")
    return f"{_SITE}{path}" if path else ""


@register_portal
class AmazonJobsAdapter(BaseAdapter):
    """
    amazon.jobs search (direct company portal).

    GET https://www.amazon.jobs/en/search.json
        ?offset=0&result_limit=200&sort=recent
        &normalized_country_code[]=GBR&city[]=London
    Reply: {"jobs": [{id, job_id, title, city, state, country_code, job_path, job_url, posted_date, ...}]}

    A city search returns every team's openings, so titles are filtered here
    against the portal keyword list before the engine sees them.
    """

    provider = Provider.DIRECT.value
    portal = "amazon"
    company = "Amazon"
    base_url = f"{_SITE}/en/search.json"

    FIELDS = {
        "id": ("id", "job_id"),
        "title": ("title",),
        "location": (_location,),
        "apply_url": (_job_url, "job_url"),
        "description": (),
        "posted_at": ("posted_date", "updated_time"),
    }

    def __init__(
        self,
        client: HttpClient | None = None,
        *,
        country_code: str = "GBR",
        city: str = "London",
        result_limit: int = 200,
        keywords: Iterable[str] = DIRECT_PORTAL_KEYWORDS,
    ) -> None:
        super().__init__(client)
        self.country_code = country_code
        self.city = city
        self.result_limit = int(result_limit)
        self.keywords = tuple(keywords)

    def endpoint(self, identifier: str) -> str:
        return self.base_url

    def params(self) -> list[tuple[str, str]]:
        # Ordered pairs: the bracketed keys repeat in real searches
        return [
            ("offset", "0"),
            ("result_limit", str(self.result_limit)),
            ("sort", "recent"),
            ("normalized_country_code[]", self.country_code),
            ("city[]", self.city),
        ]

    def fetch(self, identifier: str = "amazon") -> list[MappedPosting]:
        url = self.endpoint(identifier)
        data = self._client.get_json(url, params=self.params())
        mapped = self.map_all(collection(url, data, ("jobs",)), identifier, company=self.company)
        kept = [p for p in mapped if includes_any(p.title, self.keywords)]
        log.debug("amazon.jobs: %d postings, %d after title filter", len(mapped), len(kept))
        return kept
