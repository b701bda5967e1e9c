# grad_watch/http_client.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests
from requests.adapters import HTTPAdapter

from .errors import MalformedResponseError, UpstreamError

LOG = logging.getLogger(__name__)

USER_AGENT = "tracker-eu/1.0"


class HttpClient:
    """Shared HTTP client: fixed user agent, default timeout, one attempt per request."""

    def __init__(
        self,
        timeout: float = 15.0,
        user_agent: str = USER_AGENT,
    ):
        self.timeout = float(timeout)
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

        # Each source gets exactly one attempt per run
        adapter = HTTPAdapter(max_retries=0, pool_connections=10, pool_maxsize=20)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    # ---- convenience ----
    def get_json(
        self,
        url: str,
        *,
        params: Any = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """GET and decode a JSON body."""
        try:
            resp = self.session.get(url, params=params, headers=headers, timeout=timeout or self.timeout)
        except requests.RequestException as e:
            raise UpstreamError(url, None, reason=repr(e)) from e
        return self._decode(url, resp)

    def post_json(
        self,
        url: str,
        payload: Any,
        *,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """POST a JSON body and decode the JSON reply."""
        try:
            resp = self.session.post(url, json=payload, headers=headers, timeout=timeout or self.timeout)
        except requests.RequestException as e:
            raise UpstreamError(url, None, reason=repr(e)) from e
        return self._decode(url, resp)

    def close(self) -> None:
        try:
            self.session.close()
        except Exception:
            LOG.debug("HttpClient.close() swallow", exc_info=True)

    # ---- internals ----
    @staticmethod
    def _decode(url: str, resp: requests.Response) -> Any:
        full_url = getattr(resp, "url", None) or url
        if not resp.ok:
            raise UpstreamError(full_url, resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            preview = (resp.text or "")[:200].replace("\n", " ")
            raise MalformedResponseError(full_url, f"JSON decode failed; body starts: {preview!r}") from e
