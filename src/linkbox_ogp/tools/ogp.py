"""Authenticated OGP fetch tool for MCP."""

from typing import Any

import structlog
from mcp.server.fastmcp import Context, FastMCP

from linkbox_ogp.auth.identity import bearer_token
from linkbox_ogp.exceptions import AuthenticationError, InvalidURLError
from linkbox_ogp.fetchers.ogp_fetcher import validate_url

logger = structlog.get_logger(__name__)


def _authorization_header(ctx: Context[Any, Any]) -> str | None:
    """Read the Authorization header of the HTTP request behind a tool call."""
    request = getattr(ctx.request_context, "request", None)
    if request is None:
        return None
    return request.headers.get("authorization")


def register(mcp: FastMCP) -> None:
    """Register the fetch_ogp tool with the MCP server."""

    @mcp.tool()
    async def fetch_ogp(
        url: str,
        ctx: Context[Any, Any] = None,  # type: ignore[assignment, type-arg]
    ) -> dict[str, str]:
        """
        Fetch Open Graph metadata (title, description, image, url, site name) for a URL.

        Requires an ``Authorization: Bearer <token>`` header.

        Args:
            url: Absolute http(s) URL of the page (required)

        Returns:
            Object with optional ogTitle, ogDescription, ogImage, ogUrl and ogSiteName keys

        Raises:
            AuthenticationError: Caller has no valid identity
            InvalidURLError: URL is not an absolute http(s) URL
            FetchTimeoutError: Page did not answer within the deadline
            UpstreamHTTPError: Page answered with a non-2xx status
            FetchNetworkError: DNS, connection or TLS failure
        """
        from linkbox_ogp.server import AppContext

        app_ctx: AppContext = ctx.request_context.lifespan_context

        identity = await app_ctx.identity_provider.identify(
            bearer_token(_authorization_header(ctx))
        )
        if identity is None:
            raise AuthenticationError()

        reason = validate_url(url)
        if reason is not None:
            raise InvalidURLError(url, reason)

        outcome = await app_ctx.cache.get(url)
        record = outcome.unwrap()

        logger.info("fetch_ogp_served", subject=identity.subject, url=url)
        return record.to_wire()
