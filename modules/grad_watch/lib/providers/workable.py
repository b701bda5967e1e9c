# modules/grad_watch/lib/providers/workable.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..models import MappedPosting, Provider
from .base import BaseAdapter, city_country, collection
from .registry import register


def _job_url(record: Mapping[str, Any], slug: str) -> str:
    shortcode = record.get("shortcode")
    if not shortcode:
        return ""
    return f"https://apply.workable.com/{slug}/j/{shortcode}/"


@register
class WorkableAdapter(BaseAdapter):
    """
    Workable careers API (v3).

    GET https://apply.workable.com/api/v3/accounts/{slug}/jobs?limit=200
    Reply: {"results": [{shortcode, id, title, location: {city, country}, publishedDate, ...}]}

    The reply carries no public URL; it is built from the account slug and shortcode.
    """

    provider = Provider.WORKABLE.value
    FIELDS = {
        "id": ("shortcode", "id"),
        "title": ("title",),
        "location": (city_country,),
        "apply_url": (_job_url,),
        "description": (),
        "posted_at": ("publishedDate", "updatedAt"),
    }

    def endpoint(self, identifier: str) -> str:
        return f"https://apply.workable.com/api/v3/accounts/{identifier}/jobs"

    def fetch(self, identifier: str) -> list[MappedPosting]:
        url = self.endpoint(identifier)
        data = self._client.get_json(url, params={"limit": 200})
        return self.map_all(collection(url, data, ("results",)), identifier)
