# modules/grad_watch/lib/providers/lever.py
from __future__ import annotations

from ..errors import MalformedResponseError
from ..models import MappedPosting, Provider
from .base import BaseAdapter
from .registry import register


@register
class LeverAdapter(BaseAdapter):
    """
    Lever postings API (JSON mode).

    GET https://api.lever.co/v0/postings/{slug}?mode=json
    Reply: a top-level array of postings
      [{id, text, categories: {location}, hostedUrl, applyUrl, descriptionPlain, createdAt, ...}]

    createdAt is Unix milliseconds.
    """

    provider = Provider.LEVER.value
    FIELDS = {
        "id": ("id", "_id", "slug"),
        "title": ("text", "title"),
        "location": ("categories.location",),
        "apply_url": ("hostedUrl", "applyUrl"),
        "description": ("descriptionPlain", "description"),
        "posted_at": ("createdAt", "updatedAt"),
    }

    def endpoint(self, identifier: str) -> str:
        return f"https://api.lever.co/v0/postings/{identifier}"

    def fetch(self, identifier: str) -> list[MappedPosting]:
        url = self.endpoint(identifier)
        data = self._client.get_json(url, params={"mode": "json"})
        if not isinstance(data, list):
            raise MalformedResponseError(url, f"expected a JSON array, got {type(data).__name__}")
        return self.map_all(data, identifier)
