# tests/conftest.py
import json
import os
import pathlib
from unittest import mock

import pytest
from freezegun import freeze_time

from modules.grad_watch.lib import config as gw_config
from modules.grad_watch.lib.http_client import HttpClient
from modules.grad_watch.lib.models import MappedPosting
from modules.grad_watch.lib.providers.base import BaseAdapter


# ---------------------------------------------------------------------
# Live tests are opt-in: use --live or RUN_LIVE_TESTS=1
# ---------------------------------------------------------------------
def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run tests marked as 'live' (real calls to provider APIs).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "live: marks tests that perform live network calls (skipped by default).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    run_live = config.getoption("--live") or os.getenv("RUN_LIVE_TESTS") == "1"
    if run_live:
        return
    skip_live = pytest.mark.skip(reason="live tests disabled (use --live or RUN_LIVE_TESTS=1)")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# ---------------------------------------------------------------------
# Test-wide env defaults (autouse, function-scoped)
# ---------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _env_defaults(monkeypatch, tmp_path):
    # Write logs to a throwaway dir so real logs stay clean (per test)
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("ACTIVITY_LOG_PREFIX", "activity-test")
    monkeypatch.setenv("ERROR_LOG_PREFIX", "error-test")
    for name in (
        "GRAD_WATCH_COMPANIES",
        "GRAD_WATCH_REGION_KEYWORDS",
        "GRAD_WATCH_SENIORITY_KEYWORDS",
        "GRAD_WATCH_MAX_DAYS",
        "GRAD_WATCH_DIRECT_PORTALS",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def frozen_utc():
    with freeze_time("2025-01-01T00:00:00Z"):
        yield


# ---------------------------------------------------------------------
# HTTP fakes
# ---------------------------------------------------------------------
class FakeResponse:
    """Just enough of requests.Response for HttpClient."""

    def __init__(self, body=None, *, status=200, text=None, url="https://example.test/api"):
        self.status_code = status
        self.url = url
        self._body = body
        self.text = text if text is not None else json.dumps(body)

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        return json.loads(self.text)


@pytest.fixture
def make_client():
    """
    Build an HttpClient whose session answers every GET/POST with one canned reply.
    The mocks are reachable as client.session.get / client.session.post.
    """

    def _make(body=None, *, status=200, text=None, url="https://example.test/api"):
        client = HttpClient()
        resp = FakeResponse(body, status=status, text=text, url=url)
        client.session.get = mock.Mock(return_value=resp)
        client.session.post = mock.Mock(return_value=resp)
        return client

    return _make


# ---------------------------------------------------------------------
# Seed list + settings
# ---------------------------------------------------------------------
@pytest.fixture
def write_companies(tmp_path: pathlib.Path):
    """Write a seed list to a temp file and return its path."""

    def _write(entries, name="companies.json") -> pathlib.Path:
        path = tmp_path / name
        path.write_text(json.dumps(entries), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_settings(write_companies):
    """Settings with no direct portals unless asked, backed by a temp seed list."""

    def _make(entries=None, **overrides):
        path = write_companies(entries or [])
        kwargs = {"companies_path": str(path), "direct_portals": [], "example_companies_path": ""}
        kwargs.update(overrides)
        return gw_config.Settings.from_env_and_kwargs(kwargs)

    return _make


@pytest.fixture
def mapped():
    """Factory for MappedPosting with London/graduate defaults that pass both classifiers."""

    def _mapped(**fields) -> MappedPosting:
        base = {
            "id": "1",
            "title": "Graduate Software Engineer",
            "location": "London, UK",
            "apply_url": "https://example.com/jobs/1",
            "description": "",
            "company": "vendor-slug",
            "source": "greenhouse",
            "posted_at": None,
        }
        base.update(fields)
        return MappedPosting(**base)

    return _mapped


@pytest.fixture
def stub_adapter():
    """
    Build adapter classes returning canned postings per identifier.
    Identifiers mapped to an Exception instance raise it instead.
    """

    def _build(by_identifier, provider="stub"):
        class Stub(BaseAdapter):
            calls: list[str] = []

            def __init__(self):
                pass

            def endpoint(self, identifier):
                return f"https://stub.test/{identifier}"

            def fetch(self, identifier):
                Stub.calls.append(identifier)
                out = by_identifier.get(identifier, [])
                if isinstance(out, Exception):
                    raise out
                return list(out)

            def close(self):
                pass

        Stub.provider = provider
        return Stub

    return _build
