"""
FastMCP server exposing the authenticated fetch_ogp action.

Configured for stateless HTTP mode for multi-client support.
"""

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass

import httpx
import structlog
from mcp.server.fastmcp import FastMCP

from linkbox_ogp.auth.identity import IdentityProvider, StaticTokenIdentityProvider
from linkbox_ogp.config import settings
from linkbox_ogp.fetchers.base import OgpFetcher
from linkbox_ogp.fetchers.ogp_fetcher import OgpFetchService
from linkbox_ogp.tools import register_all_tools
from linkbox_ogp.utils.cache import OgpRequestCache

logger = structlog.get_logger(__name__)


@dataclass
class AppContext:
    """Shared application resources available to routes and tools."""

    http_client: httpx.AsyncClient
    fetcher: OgpFetcher
    cache: OgpRequestCache
    identity_provider: IdentityProvider


# Context owned by the HTTP application lifespan, reused by every MCP request
_shared_context: AppContext | None = None


def create_http_client() -> httpx.AsyncClient:
    """
    Create the pooled HTTP client used for outbound page fetches.

    Returns:
        Configured httpx.AsyncClient
    """
    return httpx.AsyncClient(
        limits=httpx.Limits(
            max_connections=settings.max_connections,
            max_keepalive_connections=settings.max_keepalive_connections,
        ),
        timeout=httpx.Timeout(settings.ogp_timeout_seconds),
        verify=settings.get_ssl_context(),
        follow_redirects=True,
    )


def create_fetcher(http_client: httpx.AsyncClient) -> OgpFetcher:
    """
    Create the OGP fetcher.

    Args:
        http_client: Shared HTTP client

    Returns:
        Configured fetcher instance
    """
    return OgpFetchService(
        timeout_seconds=settings.ogp_timeout_seconds,
        http_client=http_client,
        user_agent=settings.ogp_user_agent,
        max_content_bytes=settings.ogp_max_content_bytes,
    )


@asynccontextmanager
async def open_app_context() -> AsyncIterator[AppContext]:
    """
    Build the shared resources and release them on exit.

    Initialize expensive resources once, share across all requests.
    """
    http_client = create_http_client()
    fetcher = create_fetcher(http_client)

    cache = OgpRequestCache(
        fetcher,
        ttl_seconds=settings.cache_ttl_seconds,
        max_size=settings.cache_max_size,
        enabled=settings.cache_enabled,
    )

    identity_provider = StaticTokenIdentityProvider(settings.get_auth_tokens())
    if not identity_provider.is_configured:
        logger.warning("no_auth_tokens_configured", tool="fetch_ogp")

    logger.info(
        "app_context_ready",
        fetcher=fetcher.name,
        cache_enabled=cache.enabled,
        cache_ttl_seconds=cache.ttl_seconds,
    )

    try:
        yield AppContext(
            http_client=http_client,
            fetcher=fetcher,
            cache=cache,
            identity_provider=identity_provider,
        )
    finally:
        logger.info("closing_app_context")
        await cache.close()
        await fetcher.close()
        await http_client.aclose()


@contextmanager
def use_shared_context(app_ctx: AppContext) -> Iterator[None]:
    """Make MCP requests reuse the given context instead of building their own."""
    global _shared_context
    previous = _shared_context
    _shared_context = app_ctx
    try:
        yield
    finally:
        _shared_context = previous


@asynccontextmanager
async def app_lifespan(_server: FastMCP) -> AsyncIterator[AppContext]:
    """
    Manage MCP server lifecycle.

    Uses the HTTP application's context when one is active so the request
    cache is shared with /api/ogp; otherwise builds a private one.
    """
    if _shared_context is not None:
        yield _shared_context
        return

    logger.info("starting_mcp_server", server_name="Linkbox OGP", debug=settings.debug)
    async with open_app_context() as app_ctx:
        yield app_ctx


# Create FastMCP server
# stateless_http=True allows multiple concurrent clients
# json_response=True for structured responses
mcp = FastMCP(
    "Linkbox OGP",
    lifespan=app_lifespan,
    stateless_http=True,
    json_response=True,
)

register_all_tools(mcp)
