# modules/grad_watch/lib/providers/ashby.py
from __future__ import annotations

from ..models import MappedPosting, Provider
from .base import BaseAdapter, collection
from .registry import register


@register
class AshbyAdapter(BaseAdapter):
    """
    Ashby public job board API.

    GET https://jobs.ashbyhq.com/api/external/jobs?organizationSlug={slug}
    Reply: {"jobs": [{id, title, location: {text|name}, jobUrl, applyUrl, descriptionPlain, publishedAt, ...}]}
    """

    provider = Provider.ASHBY.value
    FIELDS = {
        "id": ("id", "jobId"),
        "title": ("title",),
        "location": ("location.text", "location.name"),
        "apply_url": ("jobUrl", "applyUrl"),
        "description": ("descriptionPlain", "description"),
        "posted_at": ("publishedAt", "updatedAt", "createdAt"),
    }

    def endpoint(self, identifier: str) -> str:
        return "https://jobs.ashbyhq.com/api/external/jobs"

    def fetch(self, identifier: str) -> list[MappedPosting]:
        url = self.endpoint(identifier)
        data = self._client.get_json(url, params={"organizationSlug": identifier})
        return self.map_all(collection(url, data, ("jobs",)), identifier)
