"""OGP fetcher that goes through the /api/ogp proxy endpoint."""

import time

import anyio
import httpx
import structlog
from pydantic import ValidationError

from linkbox_ogp.fetchers.ogp_fetcher import DEFAULT_TIMEOUT_SECONDS
from linkbox_ogp.models.ogp import (
    FailureKind,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    OgpRecord,
)

logger = structlog.get_logger(__name__)

OGP_PROXY_PATH = "/api/ogp"

# Allow the proxy its own deadline plus a margin for the round trip
PROXY_TIMEOUT_MARGIN_SECONDS = 2.0


class OgpProxyClient:
    """
    Client for a linkbox-ogp proxy.

    Used where the target site cannot be fetched directly, for example from
    a browser blocked by cross-origin rules. Maps the proxy's HTTP answers
    back to FetchOutcome values so it can sit behind an OgpRequestCache.
    """

    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS + PROXY_TIMEOUT_MARGIN_SECONDS,
    ) -> None:
        """
        Initialize the proxy client.

        Args:
            base_url: Proxy origin, e.g. "https://linkbox.example.com"
            http_client: Shared HTTP client (optional)
            timeout_seconds: Total deadline per proxy call
        """
        self._base_url = base_url.rstrip("/")
        self._http_client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout_seconds

    @property
    def name(self) -> str:
        """Return the fetcher name."""
        return "proxy"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def fetch(self, url: str) -> FetchOutcome:
        """
        Ask the proxy for a URL's Open Graph metadata.

        Args:
            url: Target URL, sent as the ``url`` query parameter

        Returns:
            FetchSuccess with the record, or FetchFailure mapped from the proxy status
        """
        start_time = time.monotonic()
        client = await self._get_client()
        should_close = self._owns_client and self._http_client is None

        try:
            with anyio.fail_after(self._timeout):
                response = await client.get(
                    f"{self._base_url}{OGP_PROXY_PATH}",
                    params={"url": url},
                )
        except (TimeoutError, httpx.TimeoutException):
            return FetchFailure(
                url=url,
                kind=FailureKind.TIMEOUT,
                message=f"OGP proxy timed out after {self._timeout}s",
                timeout_seconds=self._timeout,
            )
        except httpx.HTTPError as e:
            return FetchFailure(
                url=url,
                kind=FailureKind.NETWORK_ERROR,
                message=f"OGP proxy request failed: {e!s}",
            )
        finally:
            if should_close:
                await client.aclose()

        logger.debug(
            "ogp_proxy_request",
            url=url,
            status_code=response.status_code,
            elapsed_ms=(time.monotonic() - start_time) * 1000,
        )
        return self._parse_response(url, response)

    def _parse_response(self, url: str, response: httpx.Response) -> FetchOutcome:
        """
        Map a proxy response to an outcome.

        The proxy relays upstream error statuses with an ``"{status} {reason}"``
        error body, so a 400, 500 or 504 carrying that body is the target
        site's answer (upstream_error), not the proxy's own invalid_url,
        network_error or timeout.
        """
        if response.status_code == 200:
            try:
                return FetchSuccess(url=url, record=OgpRecord.model_validate(response.json()))
            except (ValueError, ValidationError) as e:
                logger.warning("ogp_proxy_bad_payload", url=url, error=str(e))
                return FetchFailure(
                    url=url,
                    kind=FailureKind.NETWORK_ERROR,
                    message="OGP proxy returned an unreadable payload",
                )

        body_error = self._body_error(response)
        message = body_error or f"{response.status_code} {response.reason_phrase}".strip()
        if body_error is not None and _is_relayed_status(body_error, response.status_code):
            return FetchFailure(
                url=url,
                kind=FailureKind.UPSTREAM_ERROR,
                message=message,
                status_code=response.status_code,
            )
        if response.status_code == 400:
            return FetchFailure(url=url, kind=FailureKind.INVALID_URL, message=message)
        if response.status_code == 504:
            return FetchFailure(
                url=url,
                kind=FailureKind.TIMEOUT,
                message=message,
                timeout_seconds=DEFAULT_TIMEOUT_SECONDS,
            )
        if response.status_code == 500:
            return FetchFailure(url=url, kind=FailureKind.NETWORK_ERROR, message=message)
        return FetchFailure(
            url=url,
            kind=FailureKind.UPSTREAM_ERROR,
            message=message,
            status_code=response.status_code,
        )

    @staticmethod
    def _body_error(response: httpx.Response) -> str | None:
        """Return the ``error`` string of a JSON error body, if any."""
        try:
            data = response.json()
        except ValueError:
            return None
        if isinstance(data, dict) and isinstance(data.get("error"), str):
            return data["error"]
        return None

    async def close(self) -> None:
        """Close the fetcher and release resources."""
        # Per-call clients are closed after each fetch; a shared client belongs to its creator
        pass


def _is_relayed_status(message: str, status_code: int) -> bool:
    """Check if an error message is an upstream ``"{status} {reason}"`` line."""
    return message.split(" ", 1)[0] == str(status_code)
