"""
End-to-end tests for the fetch_ogp tool.
Runs the real fetcher and cache against mocked pages, without the MCP transport.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import respx
from httpx import Response

from linkbox_ogp.auth import StaticTokenIdentityProvider
from linkbox_ogp.exceptions import AuthenticationError, FetchTimeoutError
from linkbox_ogp.fetchers import OgpFetchService
from linkbox_ogp.utils.cache import OgpRequestCache


class TestFetchOgpTool:
    """Tool calls with real fetch, extraction and caching."""

    @pytest.fixture
    def fetch_ogp(self):
        from linkbox_ogp.tools import ogp as ogp_tool

        mcp = MagicMock()
        registered = {}

        def tool():
            def decorator(func):
                registered[func.__name__] = func
                return func

            return decorator

        mcp.tool = tool
        ogp_tool.register(mcp)
        return registered["fetch_ogp"]

    @pytest.fixture
    def make_ctx(self):
        def build(fetcher, authorization="Bearer tok-a"):
            app_ctx = SimpleNamespace(
                cache=OgpRequestCache(fetcher),
                identity_provider=StaticTokenIdentityProvider({"tok-a": "alice"}),
            )
            ctx = MagicMock()
            ctx.request_context.lifespan_context = app_ctx
            ctx.request_context.request.headers = {"authorization": authorization}
            return ctx

        return build

    @pytest.mark.asyncio
    @respx.mock
    async def test_full_flow(self, fetch_ogp, make_ctx, sample_og_html):
        route = respx.get("https://example.com/article").mock(
            return_value=Response(200, html=sample_og_html)
        )
        ctx = make_ctx(OgpFetchService())

        first = await fetch_ogp(url="https://example.com/article", ctx=ctx)
        second = await fetch_ogp(url="https://example.com/article", ctx=ctx)

        assert first == {
            "ogTitle": "Example Article",
            "ogDescription": "An article about examples.",
            "ogImage": "https://example.com/cover.png",
            "ogUrl": "https://example.com/article",
            "ogSiteName": "Example Site",
        }
        assert second == first
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_fallback_fields(self, fetch_ogp, make_ctx, sample_plain_html):
        respx.get("https://example.com/plain").mock(
            return_value=Response(200, html=sample_plain_html)
        )

        result = await fetch_ogp(url="https://example.com/plain", ctx=make_ctx(OgpFetchService()))

        assert result == {"ogTitle": "Plain Page", "ogDescription": "Plain description"}

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout_raised_to_caller(self, fetch_ogp, make_ctx):
        import httpx

        respx.get("https://slow.example.com/").mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(FetchTimeoutError):
            await fetch_ogp(url="https://slow.example.com/", ctx=make_ctx(OgpFetchService()))

    @pytest.mark.asyncio
    @respx.mock
    async def test_unauthenticated_never_fetches(self, fetch_ogp, make_ctx):
        route = respx.get("https://example.com/article").mock(return_value=Response(200))

        with pytest.raises(AuthenticationError):
            await fetch_ogp(
                url="https://example.com/article",
                ctx=make_ctx(OgpFetchService(), authorization="Bearer nope"),
            )

        assert route.call_count == 0
