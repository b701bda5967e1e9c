# modules/grad_watch/lib/providers/smartrecruiters.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models import MappedPosting, Provider
from .base import BaseAdapter, city_country, collection
from .registry import register


def _public_url(record: Mapping[str, Any], slug: str) -> str:
    job_id = record.get("id")
    if not job_id:
        return ""
    return f"https://jobs.smartrecruiters.com/{slug}/{job_id}"


@register
class SmartRecruitersAdapter(BaseAdapter):
    """
    SmartRecruiters posting API.

    GET https://api.smartrecruiters.com/v1/companies/{slug}/postings?limit=200
    Reply: {"content": [{id, uuid, name, location: {city, country}, applyUrl, ref, releasedDate, ...}]}
    Older tenants answer with "results" or "data" instead of "content".
    """

    provider = Provider.SMARTRECRUITERS.value
    FIELDS = {
        "id": ("id", "uuid"),
        "title": ("name", "title"),
        "location": (city_country,),
        "apply_url": ("applyUrl", "ref", _public_url),
        "description": (),
        "posted_at": ("releasedDate", "updatedAt"),
    }

    def endpoint(self, identifier: str) -> str:
        return f"https://api.smartrecruiters.com/v1/companies/{identifier}/postings"

    def fetch(self, identifier: str) -> list[MappedPosting]:
        url = self.endpoint(identifier)
        data = self._client.get_json(url, params={"limit": 200})
        return self.map_all(collection(url, data, ("content", "results", "data")), identifier)
