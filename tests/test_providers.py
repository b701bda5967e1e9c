# tests/test_providers.py
import pytest
import requests

from modules.grad_watch.lib.errors import MalformedResponseError, UpstreamError
from modules.grad_watch.lib.http_client import USER_AGENT, HttpClient
from modules.grad_watch.lib.providers import (
    AmazonJobsAdapter,
    AshbyAdapter,
    GreenhouseAdapter,
    LeverAdapter,
    MicrosoftCareersAdapter,
    SmartRecruitersAdapter,
    WorkableAdapter,
    registry,
)
from modules.grad_watch.lib.providers.base import BaseAdapter, dig, first_of


def _sent_url(mock_get) -> str:
    """Final URL (query string included) that requests would have sent."""
    args, kwargs = mock_get.call_args
    return requests.Request("GET", args[0], params=kwargs.get("params")).prepare().url


# ----------------------------------------------------------------------
# Field precedence helpers
# ----------------------------------------------------------------------
def test_dig_follows_nested_paths():
    rec = {"location": {"name": "London"}, "flat": "x"}
    assert dig(rec, "location.name") == "London"
    assert dig(rec, "location.city") is None
    assert dig(rec, "flat.deeper") is None


def test_first_of_skips_empty_values_in_order():
    rec = {"a": "", "b": 0, "c": None, "d": "winner", "e": "loser"}
    assert first_of(rec, ("a", "b", "c", "d", "e")) == "winner"
    assert first_of(rec, ("a", "b")) is None
    assert first_of(rec, (lambda r, ident: f"{ident}-built",), "slug") == "slug-built"
    assert first_of("not a record", ("a",)) is None


# ----------------------------------------------------------------------
# Greenhouse
# ----------------------------------------------------------------------
def test_greenhouse_request_and_mapping(make_client):
    client = make_client({
        "jobs": [
            {
                "id": 4012345,
                "title": "Graduate Software Engineer",
                "location": {"name": "London, UK"},
                "absolute_url": "https://boards.greenhouse.io/acme/jobs/4012345",
                "updated_at": "2025-01-08T10:00:00-05:00",
                "created_at": "2024-12-01T00:00:00Z",
                "content": "&lt;p&gt;About the role&lt;/p&gt;",
            }
        ]
    })

    out = GreenhouseAdapter(client).fetch("acme")

    assert _sent_url(client.session.get) == "https://boards-api.greenhouse.io/v1/boards/acme/jobs?content=true"
    assert len(out) == 1
    p = out[0]
    assert p.id == "4012345"
    assert p.title == "Graduate Software Engineer"
    assert p.location == "London, UK"
    assert p.apply_url == "https://boards.greenhouse.io/acme/jobs/4012345"
    assert p.description == ""
    assert p.posted_at == "2025-01-08T10:00:00-05:00"
    assert p.company == "acme"
    assert p.source == "greenhouse"


def test_greenhouse_falls_back_to_created_at(make_client):
    client = make_client({"jobs": [{"id": 1, "title": "T", "created_at": "2024-12-01T00:00:00Z"}]})
    (p,) = GreenhouseAdapter(client).fetch("acme")
    assert p.posted_at == "2024-12-01T00:00:00Z"
    assert p.location == ""
    assert p.apply_url == ""


def test_greenhouse_missing_jobs_key_is_empty(make_client):
    assert GreenhouseAdapter(make_client({"meta": {"total": 0}})).fetch("acme") == []


def test_malformed_records_map_to_defaults_instead_of_being_dropped(make_client):
    client = make_client({"jobs": [None, "junk", {}, {"title": "Only a title"}]})
    out = GreenhouseAdapter(client).fetch("acme")
    assert len(out) == 4
    assert out[0].id == "" and out[0].title == "" and out[0].posted_at is None
    assert out[3].title == "Only a title"
    assert all(p.company == "acme" for p in out)


# ----------------------------------------------------------------------
# Lever
# ----------------------------------------------------------------------
def test_lever_request_and_precedence(make_client):
    client = make_client([
        {
            "_id": "abc-123",
            "slug": "ignored-slug",
            "text": "New Grad Engineer",
            "title": "ignored title",
            "categories": {"location": "London"},
            "hostedUrl": "https://jobs.lever.co/acme/abc-123",
            "applyUrl": "https://jobs.lever.co/acme/abc-123/apply",
            "descriptionPlain": "Plain body",
            "description": "<p>Html body</p>",
            "createdAt": 1736380800000,
            "updatedAt": 1736467200000,
        },
        {"id": "x", "title": "Fallback Title", "applyUrl": "https://jobs.lever.co/acme/x/apply", "description": "Html"},
    ])

    out = LeverAdapter(client).fetch("acme")

    assert _sent_url(client.session.get) == "https://api.lever.co/v0/postings/acme?mode=json"
    first, second = out
    assert first.id == "abc-123"
    assert first.title == "New Grad Engineer"
    assert first.location == "London"
    assert first.apply_url == "https://jobs.lever.co/acme/abc-123"
    assert first.description == "Plain body"
    assert first.posted_at == 1736380800000
    assert second.title == "Fallback Title"
    assert second.apply_url == "https://jobs.lever.co/acme/x/apply"
    assert second.description == "Html"
    assert second.location == ""


def test_lever_object_payload_is_malformed(make_client):
    client = make_client({"ok": False, "error": "Document not found"})
    with pytest.raises(MalformedResponseError):
        LeverAdapter(client).fetch("missing")


# ----------------------------------------------------------------------
# Ashby
# ----------------------------------------------------------------------
def test_ashby_request_and_mapping(make_client):
    client = make_client({
        "jobs": [
            {
                "jobId": "j-1",
                "title": "Graduate Analyst",
                "location": {"text": "London", "name": "London Office"},
                "applyUrl": "https://jobs.ashbyhq.com/acme/j-1/application",
                "description": "Html body",
                "updatedAt": "2025-01-09T00:00:00Z",
                "createdAt": "2025-01-01T00:00:00Z",
            },
            {"id": "j-2", "title": "Plain", "location": {"name": "London Office"}, "jobUrl": "https://x/j-2"},
        ]
    })

    first, second = AshbyAdapter(client).fetch("acme")

    assert _sent_url(client.session.get) == "https://jobs.ashbyhq.com/api/external/jobs?organizationSlug=acme"
    assert first.id == "j-1"
    assert first.location == "London"
    assert first.apply_url == "https://jobs.ashbyhq.com/acme/j-1/application"
    assert first.description == "Html body"
    assert first.posted_at == "2025-01-09T00:00:00Z"
    assert second.location == "London Office"
    assert second.apply_url == "https://x/j-2"


# ----------------------------------------------------------------------
# Workable
# ----------------------------------------------------------------------
def test_workable_builds_location_and_url(make_client):
    client = make_client({
        "results": [
            {
                "shortcode": "AB12CD",
                "id": 99,
                "title": "Junior Developer",
                "location": {"city": "London", "country": "United Kingdom"},
                "publishedDate": "2025-01-09",
            },
            {"id": 7, "title": "Remote Role", "location": {"country": "Ireland"}, "updatedAt": "2025-01-02"},
        ]
    })

    first, second = WorkableAdapter(client).fetch("acme")

    assert _sent_url(client.session.get) == "https://apply.workable.com/api/v3/accounts/acme/jobs?limit=200"
    assert first.id == "AB12CD"
    assert first.location == "London, United Kingdom"
    assert first.apply_url == "https://apply.workable.com/acme/j/AB12CD/"
    assert first.posted_at == "2025-01-09"
    assert second.id == "7"
    assert second.location == "Ireland"
    assert second.apply_url == ""
    assert second.posted_at == "2025-01-02"


# ----------------------------------------------------------------------
# SmartRecruiters
# ----------------------------------------------------------------------
def test_smartrecruiters_collection_and_url_fallbacks(make_client):
    client = make_client({
        "content": [],
        "results": [
            {
                "id": "744000",
                "name": "Graduate Consultant",
                "title": "ignored",
                "location": {"city": "London", "country": "gb"},
                "ref": "https://api.smartrecruiters.com/v1/companies/acme/postings/744000",
                "releasedDate": "2025-01-09T08:00:00.000Z",
            },
            {"uuid": "u-2", "id": "744001", "title": "Intern", "location": {"country": "gb"}},
        ],
    })

    first, second = SmartRecruitersAdapter(client).fetch("acme")

    assert _sent_url(client.session.get) == "https://api.smartrecruiters.com/v1/companies/acme/postings?limit=200"
    assert first.title == "Graduate Consultant"
    assert first.location == "London, gb"
    assert first.apply_url == "https://api.smartrecruiters.com/v1/companies/acme/postings/744000"
    assert second.id == "744001"
    assert second.title == "Intern"
    assert second.apply_url == "https://jobs.smartrecruiters.com/acme/744001"


# ----------------------------------------------------------------------
# Direct portals
# ----------------------------------------------------------------------
def test_amazon_request_mapping_and_early_filter(make_client):
    client = make_client({
        "jobs": [
            {
                "id": "2800001",
                "title": "Software Dev Engineer, Graduate",
                "city": "London",
                "state": "",
                "country_code": "GBR",
                "job_path": "/en/jobs/2800001/software-dev-engineer-graduate",
                "posted_date": "January  8, 2025",
            },
            {"id": "2800002", "title": "Senior Manager", "city": "London", "country_code": "GBR"},
            {"job_id": "2800003", "title": "Early Career Analyst", "job_url": "https://amazon.jobs/x"},
        ]
    })

    out = AmazonJobsAdapter(client).fetch("amazon")

    assert _sent_url(client.session.get) == (
        "https://www.amazon.jobs/en/search.json?offset=0&result_limit=200&sort=recent"
        "&normalized_country_code%5B%5D=GBR&city%5B%5D=London"
    )
    assert [p.id for p in out] == ["2800001", "2800003"]
    first = out[0]
    assert first.location == "London, GBR"
    assert first.apply_url == "https://www.amazon.jobs/en/jobs/2800001/software-dev-engineer-graduate"
    assert first.company == "Amazon"
    assert first.source == "direct"
    assert out[1].apply_url == "https://amazon.jobs/x"


def test_microsoft_posts_search_payload(make_client):
    client = make_client({
        "searchResults": [
            {
                "jobId": "1790001",
                "title": "Software Engineer: New Grad",
                "location": "London, United Kingdom",
                "jobUrl": "https://jobs.careers.microsoft.com/global/en/job/1790001",
                "postedDate": "2025-01-09T00:00:00+00:00",
            },
            {"id": "1790002", "jobTitle": "Graduate PM", "formattedLocation": "London", "url": "https://x/2"},
        ]
    })

    adapter = MicrosoftCareersAdapter(client)
    first, second = adapter.fetch("microsoft")

    args, kwargs = client.session.post.call_args
    assert args[0] == "https://gcsservices.careers.microsoft.com/search/api/v1/search"
    assert kwargs["json"] == {
        "page": 1,
        "pageSize": 50,
        "keywords": "graduate OR new grad OR entry level",
        "location": "London",
        "lang": "en_us",
    }
    assert kwargs["headers"] == {
        "origin": "https://careers.microsoft.com",
        "referer": "https://careers.microsoft.com/",
    }
    assert "origin" not in client.session.headers
    assert first.id == "1790001"
    assert first.company == "Microsoft"
    assert second.title == "Graduate PM"
    assert second.location == "London"
    assert second.apply_url == "https://x/2"


def test_microsoft_value_collection(make_client):
    client = make_client({"value": [{"jobId": "1", "title": "Graduate"}]})
    assert [p.id for p in MicrosoftCareersAdapter(client).fetch("microsoft")] == ["1"]


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------
def test_non_2xx_raises_upstream_error(make_client):
    client = make_client({"error": "nope"}, status=404, url="https://boards-api.greenhouse.io/v1/boards/gone/jobs")
    with pytest.raises(UpstreamError) as exc_info:
        GreenhouseAdapter(client).fetch("gone")
    assert exc_info.value.status == 404
    assert exc_info.value.url == "https://boards-api.greenhouse.io/v1/boards/gone/jobs"


def test_undecodable_body_raises_malformed(make_client):
    client = make_client(text="<html>maintenance</html>")
    with pytest.raises(MalformedResponseError):
        AshbyAdapter(client).fetch("acme")


@pytest.mark.parametrize("body", [[{"id": 1}], {"jobs": {"id": 1}}, "just a string"])
def test_wrong_payload_shape_raises_malformed(make_client, body):
    with pytest.raises(MalformedResponseError):
        GreenhouseAdapter(make_client(body)).fetch("acme")


def test_transport_error_becomes_upstream_error(make_client):
    client = make_client({})
    client.session.get.side_effect = requests.ConnectionError("dns failure")
    with pytest.raises(UpstreamError) as exc_info:
        WorkableAdapter(client).fetch("acme")
    assert exc_info.value.status is None


def test_client_sends_fixed_user_agent():
    client = HttpClient()
    assert client.session.headers["User-Agent"] == USER_AGENT == "tracker-eu/1.0"


# ----------------------------------------------------------------------
# Registry
# ----------------------------------------------------------------------
def test_registry_resolves_every_ats_provider():
    assert registry.get("greenhouse") is GreenhouseAdapter
    assert registry.get("Lever") is LeverAdapter
    assert registry.get("ashby") is AshbyAdapter
    assert registry.get("workable") is WorkableAdapter
    assert registry.get("smartrecruiters") is SmartRecruitersAdapter
    assert set(registry.all_portals()) == {"amazon", "microsoft"}


def test_registry_unknown_provider_raises_key_error():
    with pytest.raises(KeyError):
        registry.get("workday")
    with pytest.raises(KeyError):
        registry.get_portal("google")


def test_registry_rejects_conflicting_registration():
    class Other(BaseAdapter):
        provider = "greenhouse"

        def endpoint(self, identifier):
            return ""

        def fetch(self, identifier):
            return []

    with pytest.raises(ValueError):
        registry.register(Other)
    # idempotent for the same class
    assert registry.register(GreenhouseAdapter) is GreenhouseAdapter


def test_adapter_without_endpoint_cannot_be_instantiated():
    class NoEndpoint(BaseAdapter):
        provider = "incomplete"

        def fetch(self, identifier):
            return []

    with pytest.raises(TypeError):
        NoEndpoint()
