"""Direct OGP fetcher: one time-bounded GET, then extraction."""

import time

import anyio
import httpx
import structlog

from linkbox_ogp.config import settings
from linkbox_ogp.models.ogp import FailureKind, FetchFailure, FetchOutcome, FetchSuccess
from linkbox_ogp.utils.ogp_extractor import extract_ogp

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_USER_AGENT = "linkbox-ogp-fetcher/1.0"
DEFAULT_MAX_CONTENT_BYTES = 5 * 1024 * 1024  # 5 MB

ACCEPT_HTML = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


def validate_url(url: str) -> str | None:
    """
    Check that a URL can be fetched.

    Args:
        url: Candidate URL

    Returns:
        None if the URL is an absolute http(s) URL, otherwise the reason it is not
    """
    if not isinstance(url, str) or not url.strip():
        return "URL is empty"
    try:
        parsed = httpx.URL(url.strip())
        # IDNA hosts are decoded lazily, so a malformed A-label raises here
        if parsed.scheme not in ("http", "https") or not parsed.host:
            return "Invalid URL format"
    except (httpx.InvalidURL, TypeError, ValueError, UnicodeError):
        return "Invalid URL format"
    return None


class _BodyReadError(Exception):
    pass


class OgpFetchService:
    """
    Fetches a page and extracts its Open Graph metadata.

    Each call is a single attempt with a hard deadline covering connect,
    headers and body. The request is streamed so that hitting the deadline
    closes the connection. No retries, no state between calls.
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        max_content_bytes: int = DEFAULT_MAX_CONTENT_BYTES,
    ) -> None:
        """
        Initialize the fetch service.

        Args:
            timeout_seconds: Total deadline per fetch
            http_client: Shared HTTP client (optional)
            user_agent: User-Agent sent to the target site
            max_content_bytes: Body bytes read before the rest is discarded
        """
        self._timeout = timeout_seconds
        self._http_client = http_client
        self._owns_client = http_client is None
        self._user_agent = user_agent
        self._max_content_bytes = max_content_bytes

    @property
    def name(self) -> str:
        """Return the fetcher name."""
        return "direct"

    @property
    def timeout_seconds(self) -> float:
        """Return the total deadline per fetch."""
        return self._timeout

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            verify=settings.get_ssl_context(),
        )

    async def fetch(self, url: str) -> FetchOutcome:
        """
        Fetch a URL and extract its Open Graph metadata.

        Args:
            url: Absolute http(s) URL

        Returns:
            FetchSuccess with the record, or FetchFailure with the reason
        """
        start_time = time.monotonic()

        reason = validate_url(url)
        if reason is not None:
            return self._failure(url, FailureKind.INVALID_URL, reason, start_time)

        target = url.strip()
        client = await self._get_client()
        should_close = self._owns_client and self._http_client is None

        try:
            with anyio.fail_after(self._timeout):
                outcome = await self._fetch_html(client, url, target, start_time)
        except (TimeoutError, httpx.TimeoutException):
            return self._failure(
                url,
                FailureKind.TIMEOUT,
                f"URL fetch timed out after {self._timeout}s",
                start_time,
            )
        except _BodyReadError as e:
            return self._failure(
                url, FailureKind.NETWORK_ERROR, f"Failed to read response body: {e}", start_time
            )
        except (httpx.HTTPError, OSError) as e:
            return self._failure(
                url, FailureKind.NETWORK_ERROR, f"Request failed: {_describe(e)}", start_time
            )
        finally:
            if should_close:
                await client.aclose()

        return outcome

    async def _fetch_html(
        self,
        client: httpx.AsyncClient,
        url: str,
        target: str,
        start_time: float,
    ) -> FetchOutcome:
        headers = {"User-Agent": self._user_agent, "Accept": ACCEPT_HTML}

        async with client.stream("GET", target, headers=headers) as response:
            if not response.is_success:
                return self._failure(
                    url,
                    FailureKind.UPSTREAM_ERROR,
                    f"{response.status_code} {response.reason_phrase}".strip(),
                    start_time,
                    status_code=response.status_code,
                )

            html = await self._read_body(response)

        record = extract_ogp(html)
        logger.debug(
            "ogp_fetch_succeeded",
            url=url,
            status_code=response.status_code,
            empty=record.is_empty,
            elapsed_ms=(time.monotonic() - start_time) * 1000,
        )
        return FetchSuccess(url=url, record=record)

    async def _read_body(self, response: httpx.Response) -> str:
        """Read at most max_content_bytes of the body and decode it."""
        chunks: list[bytes] = []
        total = 0
        try:
            async for chunk in response.aiter_bytes():
                chunk = chunk[: self._max_content_bytes - total]
                chunks.append(chunk)
                total += len(chunk)
                if total >= self._max_content_bytes:
                    break
        except httpx.TimeoutException:
            raise
        except (httpx.HTTPError, httpx.StreamError, OSError) as e:
            raise _BodyReadError(_describe(e)) from e

        body = b"".join(chunks)
        encoding = response.charset_encoding or "utf-8"
        try:
            return body.decode(encoding, errors="replace")
        except LookupError:
            return body.decode("utf-8", errors="replace")

    def _failure(
        self,
        url: str,
        kind: FailureKind,
        message: str,
        start_time: float,
        status_code: int | None = None,
    ) -> FetchFailure:
        logger.warning(
            "ogp_fetch_failed",
            url=url,
            kind=kind.value,
            message=message,
            elapsed_ms=(time.monotonic() - start_time) * 1000,
        )
        return FetchFailure(
            url=url,
            kind=kind,
            message=message,
            status_code=status_code,
            timeout_seconds=self._timeout if kind is FailureKind.TIMEOUT else None,
        )

    async def close(self) -> None:
        """Close the fetcher and release resources."""
        # Per-call clients are closed after each fetch; a shared client belongs to its creator
        pass


def _describe(exc: BaseException) -> str:
    message = str(exc).strip()
    return message or exc.__class__.__name__
