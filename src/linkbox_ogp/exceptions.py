"""Custom exceptions for linkbox-ogp."""

from linkbox_ogp.models.ogp import FailureKind


class LinkboxOGPError(Exception):
    """Base exception for all linkbox-ogp errors."""

    pass


# ─── Fetch Errors ────────────────────────────────────────────────


class OgpFetchError(LinkboxOGPError):
    """Base exception for OGP fetch failures."""

    kind: FailureKind = FailureKind.NETWORK_ERROR

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        self.message = message
        super().__init__(f"[{url}] {message}")


class InvalidURLError(OgpFetchError):
    """Raised when a URL is not a fetchable absolute http(s) URL."""

    kind = FailureKind.INVALID_URL

    def __init__(self, url: str, reason: str = "Invalid URL format") -> None:
        super().__init__(url, reason)


class FetchTimeoutError(OgpFetchError):
    """Raised when the target did not answer before the deadline."""

    kind = FailureKind.TIMEOUT

    def __init__(self, url: str, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(url, f"URL fetch timed out after {timeout_seconds}s")


class UpstreamHTTPError(OgpFetchError):
    """Raised when the target answered with a non-2xx status."""

    kind = FailureKind.UPSTREAM_ERROR

    def __init__(self, url: str, status_code: int, reason: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(url, f"{status_code} {reason}".strip())


class FetchNetworkError(OgpFetchError):
    """Raised on DNS, connection, TLS or body-read failures."""

    kind = FailureKind.NETWORK_ERROR

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(url, reason)


# ─── Auth Errors ─────────────────────────────────────────────────


class AuthenticationError(LinkboxOGPError):
    """Raised when a caller has no valid identity."""

    def __init__(self, message: str = "Not authenticated. Cannot fetch OGP data.") -> None:
        self.message = message
        super().__init__(message)
