from __future__ import annotations


class ProviderError(Exception):
    """Base exception for provider adapter failures."""


class UpstreamError(ProviderError):
    """
    The provider answered with a non-2xx status, or could not be reached at all
    (status is None in that case).
    """

    def __init__(self, url: str, status: int | None, *, reason: str = "") -> None:
        self.url = url
        self.status = status
        self.reason = reason
        detail = f"HTTP {status}" if status is not None else (reason or "request failed")
        super().__init__(f"{url} -> {detail}")


class MalformedResponseError(ProviderError):
    """The body could not be decoded, or was not the shape the adapter expects."""

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"{url}: {detail}")
