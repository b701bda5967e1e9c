# modules/grad_watch/lib/providers/greenhouse.py
from __future__ import annotations

from ..models import MappedPosting, Provider
from .base import BaseAdapter, collection
from .registry import register


@register
class GreenhouseAdapter(BaseAdapter):
    """
    Greenhouse job board API.

    GET https://boards-api.greenhouse.io/v1/boards/{slug}/jobs?content=true
    Reply: {"jobs": [{id, title, location: {name}, absolute_url, updated_at, created_at, ...}]}

    The board API returns HTML `content`, which is not used as description text.
    """

    provider = Provider.GREENHOUSE.value
    FIELDS = {
        "id": ("id",),
        "title": ("title",),
        "location": ("location.name",),
        "apply_url": ("absolute_url",),
        "description": (),
        "posted_at": ("updated_at", "created_at"),
    }

    def endpoint(self, identifier: str) -> str:
        return f"https://boards-api.greenhouse.io/v1/boards/{identifier}/jobs"

    def fetch(self, identifier: str) -> list[MappedPosting]:
        url = self.endpoint(identifier)
        data = self._client.get_json(url, params={"content": "true"})
        return self.map_all(collection(url, data, ("jobs",)), identifier)
