# modules/grad_watch/lib/providers/microsoft.py
from __future__ import annotations

from ..http_client import HttpClient
from ..models import MappedPosting, Provider
from .base import BaseAdapter, collection
from .registry import register_portal

DEFAULT_QUERY = "graduate OR new grad OR entry level"

# Sent with every search; the service expects them from its own web front-end
SEARCH_HEADERS = {
    "origin": "https://careers.microsoft.com",
    "referer": "https://careers.microsoft.com/",
}


@register_portal
class MicrosoftCareersAdapter(BaseAdapter):
    """
    Microsoft careers search (direct company portal).

    POST https://gcsservices.careers.microsoft.com/search/api/v1/search
    Body: {"page": 1, "pageSize": 50, "keywords": "...", "location": "London", "lang": "en_us"}
    Reply: {"searchResults": [...]} (older deployments: "value" or "jobs")
      items: {jobId, id, title, jobTitle, location, formattedLocation, jobUrl, url, postedDate, lastModified}

    Seniority is narrowed server-side through the keyword query.
    """

    provider = Provider.DIRECT.value
    portal = "microsoft"
    company = "Microsoft"
    base_url = "https://gcsservices.careers.microsoft.com/search/api/v1/search"

    FIELDS = {
        "id": ("jobId", "id"),
        "title": ("title", "jobTitle"),
        "location": ("location", "formattedLocation"),
        "apply_url": ("jobUrl", "url"),
        "description": (),
        "posted_at": ("postedDate", "lastModified"),
    }

    def __init__(
        self,
        client: HttpClient | None = None,
        *,
        keywords: str = DEFAULT_QUERY,
        location: str = "London",
        page_size: int = 50,
    ) -> None:
        super().__init__(client)
        self.keywords = keywords
        self.location = location
        self.page_size = int(page_size)

    def endpoint(self, identifier: str) -> str:
        return self.base_url

    def payload(self) -> dict:
        return {
            "page": 1,
            "pageSize": self.page_size,
            "keywords": self.keywords,
            "location": self.location,
            "lang": "en_us",
        }

    def fetch(self, identifier: str = "microsoft") -> list[MappedPosting]:
        url = self.endpoint(identifier)
        data = self._client.post_json(url, self.payload(), headers=SEARCH_HEADERS)
        records = collection(url, data, ("searchResults", "value", "jobs"))
        return self.map_all(records, identifier, company=self.company)
