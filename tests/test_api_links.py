"""Tests for the /links, /extract and /health API endpoints.

The pipeline is patched at the router's import site, so no network calls are
made and each fetch outcome can be chosen per test.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from linkparser.api.app import create_app
from linkparser.errors import (
    FetchHttpStatus,
    FetchNetworkError,
    FetchTimeout,
    InvalidUrlError,
)
from linkparser.scraper.models import LinkSet, PageLinks


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def client():
    app = create_app()
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


def _page() -> PageLinks:
    return PageLinks(
        url="https://example.com/",
        final_url="https://www.example.com/",
        status_code=200,
        html="<a href='/a'>a</a><a href='/b'>b</a>",
        links=LinkSet(["https://www.example.com/a", "https://www.example.com/b"]),
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestHealth:
    def test_ok(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestGetLinks:
    def test_returns_links_without_html_by_default(self, client):
        with patch("linkparser.api.routers.links.load_links", return_value=_page()) as mock_load:
            resp = client.get("/links", params={"url": "example.com"})

        mock_load.assert_called_once_with("example.com")
        assert resp.status_code == 200
        data = resp.json()
        assert data["url"] == "https://example.com/"
        assert data["final_url"] == "https://www.example.com/"
        assert data["count"] == 2
        assert data["links"] == ["https://www.example.com/a", "https://www.example.com/b"]
        assert "html" not in data

    def test_include_html(self, client):
        with patch("linkparser.api.routers.links.load_links", return_value=_page()):
            resp = client.get("/links", params={"url": "example.com", "include_html": "true"})

        assert resp.status_code == 200
        assert resp.json()["html"].startswith("<a href='/a'>")

    def test_invalid_url_is_422(self, client):
        with patch(
            "linkparser.api.routers.links.load_links",
            side_effect=InvalidUrlError("   ", "empty input"),
        ):
            resp = client.get("/links", params={"url": "   "})

        assert resp.status_code == 422

    def test_upstream_status_is_502_with_code(self, client):
        with patch(
            "linkparser.api.routers.links.load_links",
            side_effect=FetchHttpStatus("https://example.com/x", 404, "Not Found"),
        ):
            resp = client.get("/links", params={"url": "example.com/x"})

        assert resp.status_code == 502
        detail = resp.json()["detail"]
        assert detail["kind"] == "http_status"
        assert detail["upstream_status"] == 404

    def test_network_error_is_502(self, client):
        with patch(
            "linkparser.api.routers.links.load_links",
            side_effect=FetchNetworkError("https://nowhere.invalid/", "Name or service not known"),
        ):
            resp = client.get("/links", params={"url": "nowhere.invalid"})

        assert resp.status_code == 502
        assert resp.json()["detail"]["kind"] == "network"

    def test_timeout_is_504(self, client):
        with patch(
            "linkparser.api.routers.links.load_links",
            side_effect=FetchTimeout("https://slow.example/", 30.0),
        ):
            resp = client.get("/links", params={"url": "slow.example"})

        assert resp.status_code == 504
        assert resp.json()["detail"]["kind"] == "timeout"

    def test_url_parameter_is_required(self, client):
        resp = client.get("/links")
        assert resp.status_code == 422


class TestPostExtract:
    def test_extracts_without_network(self, client):
        body = {
            "html": "<a href='/a'>1</a><a href='/A'>dup?</a><a href='#x'>frag</a><a href=b>b</a>",
            "base": "example.com/dir/",
        }
        resp = client.post("/extract", json=body)

        assert resp.status_code == 200
        data = resp.json()
        assert data["base"] == "https://example.com/dir/"
        assert data["links"] == ["https://example.com/a", "https://example.com/dir/b"]
        assert data["count"] == 2

    def test_bad_base_is_422(self, client):
        resp = client.post("/extract", json={"html": "<a href='/a'>1</a>", "base": "  "})
        assert resp.status_code == 422
