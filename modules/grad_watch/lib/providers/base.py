from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Union

from ..errors import MalformedResponseError
from ..http_client import HttpClient
from ..models import MappedPosting

# A field accessor is a dotted path into the vendor record ("location.name")
# or a callable taking (record, identifier).
Accessor = Union[str, Callable[[Mapping[str, Any], str], Any]]

# Logical attributes every adapter maps, in output order
ATTRIBUTES = ("id", "title", "location", "apply_url", "description", "posted_at")


def dig(record: Any, path: str) -> Any:
    """Follow a dotted path through nested dicts; None as soon as a hop is missing."""
    cur = record
    for part in path.split("."):
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(part)
    return cur


def first_of(record: Any, accessors: Sequence[Accessor], identifier: str = "") -> Any:
    """
    Return the first truthy value produced by `accessors`, in order.
    Returns None when every accessor comes up empty.
    """
    if not isinstance(record, Mapping):
        return None
    for acc in accessors:
        val = acc(record, identifier) if callable(acc) else dig(record, acc)
        if val:
            return val
    return None


def city_country(record: Mapping[str, Any], _identifier: str) -> str:
    """'City, Country' when a city is present, else the bare country."""
    loc = record.get("location")
    if not isinstance(loc, Mapping):
        return ""
    if loc.get("city"):
        return f"{loc['city']}, {loc.get('country') or ''}"
    return str(loc.get("country") or "")


def collection(url: str, payload: Any, keys: Sequence[str]) -> list[Any]:
    """
    Pull the list of vendor records out of a decoded payload.
    The first truthy key wins; a missing key means "no postings". A payload of
    the wrong type, or a collection that is not a list, is malformed.
    """
    if not isinstance(payload, Mapping):
        raise MalformedResponseError(url, f"expected a JSON object, got {type(payload).__name__}")
    for key in keys:
        val = payload.get(key)
        if val:
            if not isinstance(val, list):
                raise MalformedResponseError(url, f"'{key}' is {type(val).__name__}, expected a list")
            return val
    return []


class BaseAdapter(ABC):
    """
    Provider adapter interface.

    Contract:
      - fetch(identifier) performs ONE request per call and returns every record
        in the response mapped onto MappedPosting (no relevance filtering,
        except for direct portals which filter early by design of their APIs).
      - Non-2xx replies raise UpstreamError; undecodable or mis-shaped payloads
        raise MalformedResponseError.
      - A malformed individual record maps to empty strings; it is never dropped.

    Subclasses set:
      provider: stable provider key, e.g. "greenhouse"
      FIELDS:   ordered accessors per logical attribute (see ATTRIBUTES)
    """

    provider: str = ""
    FIELDS: dict[str, tuple[Accessor, ...]] = {}

    def __init__(self, client: HttpClient | None = None) -> None:
        self._client = client or HttpClient()

    @abstractmethod
    def fetch(self, identifier: str) -> list[MappedPosting]:
        raise NotImplementedError

    @abstractmethod
    def endpoint(self, identifier: str) -> str:
        """Request URL (without query string) for `identifier`."""
        raise NotImplementedError

    # ---- mapping ----
    def map_record(self, record: Any, identifier: str, *, company: str | None = None) -> MappedPosting:
        values: dict[str, Any] = {}
        for attr in ATTRIBUTES:
            values[attr] = first_of(record, self.FIELDS.get(attr, ()), identifier)

        posted_at = values["posted_at"]
        return MappedPosting(
            id=_text(values["id"]),
            title=_text(values["title"]),
            location=_text(values["location"]),
            apply_url=_text(values["apply_url"]),
            description=_text(values["description"]),
            company=company if company is not None else identifier,
            source=self.provider,
            posted_at=posted_at if posted_at else None,
        )

    def map_all(self, records: Sequence[Any], identifier: str, *, company: str | None = None) -> list[MappedPosting]:
        return [self.map_record(r, identifier, company=company) for r in records]

    def close(self) -> None:
        self._client.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(provider={self.provider!r})"


def _text(val: Any) -> str:
    if val is None:
        return ""
    return val if isinstance(val, str) else str(val)
