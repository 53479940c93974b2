"""Tests for the service worker manifest and chunk registry sources."""

from unittest.mock import AsyncMock

import pytest

from graphql_endpoint_scraper.discovery.sources import fetch_bundle_urls, harvest_chunk_source, parse_asset_manifest

SERVICE_WORKER = """
self.ASSETS=["https://abs.twimg.com/responsive-web/client-web/main.8f570f4a.js",
"https://abs.twimg.com/responsive-web/client-web/vendor.2a1f7c6e.js",
"https://abs.twimg.com/responsive-web/client-web/i18n/en.b3c2d1a0.json",
"https://abs.twimg.com/responsive-web/client-web/ondemand.Settings.9e8d7c6b.js"];
self.addEventListener("install",function(e){});
"""

pytestmark = [pytest.mark.anyio]


class TestParseAssetManifest:
    def test_keeps_only_scripts_in_order(self):
        assert parse_asset_manifest(SERVICE_WORKER) == [
            "https://abs.twimg.com/responsive-web/client-web/main.8f570f4a.js",
            "https://abs.twimg.com/responsive-web/client-web/vendor.2a1f7c6e.js",
            "https://abs.twimg.com/responsive-web/client-web/ondemand.Settings.9e8d7c6b.js",
        ]

    def test_missing_marker_yields_empty(self):
        assert parse_asset_manifest('self.addEventListener("fetch",function(){})') == []
        assert parse_asset_manifest("") == []

    def test_empty_manifest(self):
        assert parse_asset_manifest("self.ASSETS=[];") == []


class TestFetchBundleUrls:
    async def test_parses_fetched_service_worker(self, page):
        page.fetch_text = AsyncMock(return_value=SERVICE_WORKER)

        urls = await fetch_bundle_urls(page, "https://x.com/sw.js", timeout=5.0)

        assert len(urls) == 3
        page.fetch_text.assert_awaited_once_with("https://x.com/sw.js", timeout=5.0)

    async def test_fetch_failure_yields_empty(self, mock_browser_session, page):
        mock_browser_session.cdp_client.send.Runtime.evaluate = AsyncMock(
            return_value={"result": {"value": {"ok": False, "status": 0, "error": "Failed to fetch"}}}
        )
        assert await fetch_bundle_urls(page, "https://x.com/sw.js") == []

    async def test_evaluate_timeout_yields_empty(self, page):
        page.fetch_text = AsyncMock(side_effect=TimeoutError())
        assert await fetch_bundle_urls(page, "https://x.com/sw.js") == []


class TestHarvestChunkSource:
    async def test_returns_joined_source(self, mock_browser_session, page):
        mock_browser_session.cdp_client.send.Runtime.evaluate = AsyncMock(
            return_value={"result": {"value": 'function(e){e.exports={queryId:"q"}}\nfunction(){}'}}
        )

        source = await harvest_chunk_source(page, "webpackChunk_twitter_responsive_web")

        assert source.startswith("function(e)")
        expression = mock_browser_session.cdp_client.send.Runtime.evaluate.call_args.kwargs["params"]["expression"]
        assert 'window["webpackChunk_twitter_responsive_web"]' in expression
        assert "chunk[1]" in expression

    async def test_in_page_exception_yields_empty(self, mock_browser_session, page):
        mock_browser_session.cdp_client.send.Runtime.evaluate = AsyncMock(
            return_value={"exceptionDetails": {"text": "Uncaught TypeError"}}
        )
        assert await harvest_chunk_source(page, "webpackChunk_app") == ""

    async def test_non_string_value_yields_empty(self, mock_browser_session, page):
        mock_browser_session.cdp_client.send.Runtime.evaluate = AsyncMock(return_value={"result": {}})
        assert await harvest_chunk_source(page, "webpackChunk_app") == ""
