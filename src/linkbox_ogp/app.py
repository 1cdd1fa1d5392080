"""
Starlette ASGI application: OGP proxy endpoint, health probes and the MCP mount.

The /api/ogp proxy exists for callers that cannot fetch the target page
themselves (browsers blocked by cross-origin rules).
"""

import contextlib
from collections.abc import AsyncIterator

import structlog
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from linkbox_ogp import __version__
from linkbox_ogp.config import settings
from linkbox_ogp.fetchers.ogp_fetcher import validate_url
from linkbox_ogp.models.ogp import FailureKind, FetchOutcome
from linkbox_ogp.server import AppContext, mcp, open_app_context, use_shared_context
from linkbox_ogp.utils.health import HealthChecker

logger = structlog.get_logger(__name__)

MISSING_URL_MESSAGE = "Missing 'url' query parameter."
TIMEOUT_MESSAGE = "URL fetch timed out."
SERVER_ERROR_MESSAGE = "Server error while fetching OGP data."


def outcome_response(outcome: FetchOutcome) -> JSONResponse:
    """
    Map a fetch outcome to the proxy's HTTP response.

    Args:
        outcome: Result of the OGP fetch

    Returns:
        200 with the record, or an error status with ``{"error": ...}``
    """
    if outcome.ok:
        return JSONResponse(outcome.record.to_wire())

    if outcome.kind is FailureKind.INVALID_URL:
        return JSONResponse({"error": outcome.message}, status_code=400)
    if outcome.kind is FailureKind.TIMEOUT:
        return JSONResponse({"error": TIMEOUT_MESSAGE}, status_code=504)
    if outcome.kind is FailureKind.UPSTREAM_ERROR and outcome.status_code:
        # Only error statuses can be relayed with a body
        status_code = outcome.status_code if outcome.status_code >= 400 else 502
        return JSONResponse({"error": outcome.message}, status_code=status_code)
    return JSONResponse({"error": SERVER_ERROR_MESSAGE}, status_code=500)


async def ogp_proxy(request: Request) -> JSONResponse:
    """
    GET /api/ogp?url=<target>: fetch a page's Open Graph metadata.

    Returns the OGP record as JSON, 400 for a missing or invalid URL, the
    upstream status for a failed fetch, 504 on timeout and 500 otherwise.
    """
    url = request.query_params.get("url")
    if not url or not url.strip():
        return JSONResponse({"error": MISSING_URL_MESSAGE}, status_code=400)

    reason = validate_url(url)
    if reason is not None:
        return JSONResponse({"error": reason}, status_code=400)

    app_ctx: AppContext = request.app.state.ogp
    try:
        outcome = await app_ctx.cache.get(url)
    except Exception as e:
        logger.exception("ogp_proxy_error", url=url, error=str(e))
        return JSONResponse({"error": SERVER_ERROR_MESSAGE}, status_code=500)

    return outcome_response(outcome)


def _health_checker(request: Request) -> HealthChecker:
    app_ctx: AppContext | None = getattr(request.app.state, "ogp", None)
    return HealthChecker(cache=app_ctx.cache if app_ctx is not None else None)


async def health_check(request: Request) -> JSONResponse:
    """
    Kubernetes-compatible health check endpoint.

    Returns 200 if healthy, 503 if unhealthy.
    """
    status = await _health_checker(request).check_all()

    http_status = 200 if status["healthy"] else 503
    return JSONResponse(status, status_code=http_status)


async def readiness_check(request: Request) -> JSONResponse:
    """
    Readiness probe - checks if server can accept requests.

    Returns 200 if ready, 503 if not ready.
    """
    status = await _health_checker(request).check_readiness()

    http_status = 200 if status["ready"] else 503
    return JSONResponse(status, status_code=http_status)


async def liveness_check(request: Request) -> JSONResponse:
    """
    Liveness probe - minimal check that server is alive.

    Always returns 200 if the server is running.
    """
    status = await _health_checker(request).check_liveness()

    return JSONResponse(status, status_code=200)


async def root(_request: Request) -> JSONResponse:
    """Root endpoint with server information."""
    return JSONResponse(
        {
            "name": "Linkbox OGP",
            "version": __version__,
            "description": "Open Graph preview fetching for bookmark cards",
            "endpoints": {
                "ogp": "/api/ogp?url=<url>",
                "mcp": "/mcp",
                "health": "/health",
                "ready": "/ready",
                "alive": "/alive",
            },
            "tools": ["fetch_ogp"],
        }
    )


def create_app(app_context: AppContext | None = None, mount_mcp: bool = True) -> Starlette:
    """
    Build the ASGI application.

    Args:
        app_context: Pre-built resources (tests); built in the lifespan when None
        mount_mcp: Whether to mount the MCP endpoint at /mcp

    Returns:
        Starlette application
    """

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        """
        Application lifespan manager.

        Initializes shared resources on startup, cleans up on shutdown.
        """
        logger.info(
            "starting_http_server",
            host=settings.host,
            port=settings.port,
            debug=settings.debug,
        )

        async with contextlib.AsyncExitStack() as stack:
            if app_context is None:
                app.state.ogp = await stack.enter_async_context(open_app_context())
            stack.enter_context(use_shared_context(app.state.ogp))
            if mount_mcp:
                # MCP server has its own lifespan, managed via session_manager
                await stack.enter_async_context(mcp.session_manager.run())
            yield

        logger.info("http_server_shutdown")

    routes = [
        # Root endpoint
        Route("/", root, methods=["GET"]),
        # OGP proxy
        Route("/api/ogp", ogp_proxy, methods=["GET"]),
        # Health endpoints
        Route("/health", health_check, methods=["GET"]),
        Route("/ready", readiness_check, methods=["GET"]),
        Route("/alive", liveness_check, methods=["GET"]),
    ]
    if mount_mcp:
        # MCP endpoint - Streamable HTTP
        routes.append(Mount("/mcp", app=mcp.streamable_http_app()))

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=settings.get_cors_origins(),
            allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
            allow_headers=["*"],
            expose_headers=["Mcp-Session-Id"],  # Required for MCP sessions
        ),
    ]

    application = Starlette(
        debug=settings.debug,
        routes=routes,
        middleware=middleware,
        lifespan=lifespan,
    )
    if app_context is not None:
        application.state.ogp = app_context
    return application


app = create_app()
