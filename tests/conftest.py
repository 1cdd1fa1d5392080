"""Shared test fixtures for the linkbox-ogp test suite."""

import asyncio
from typing import Any

import pytest
import respx

from linkbox_ogp.models.ogp import FailureKind, FetchFailure, FetchOutcome, FetchSuccess, OgpRecord

# ─── Pytest Configuration ────────────────────────────────────────


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no I/O)")
    config.addinivalue_line("markers", "e2e: End-to-end tests")
    config.addinivalue_line("markers", "slow: Slow tests (skipped by default)")


# ─── Async Backend ───────────────────────────────────────────────


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


# ─── Settings Fixtures ───────────────────────────────────────────


@pytest.fixture
def test_settings():
    """Test settings with no tokens and caching on."""
    from linkbox_ogp.config import Settings

    return Settings(
        debug=True,
        log_level="DEBUG",
        auth_tokens=None,
        cache_enabled=True,
    )


# ─── HTTP Client Fixtures ────────────────────────────────────────


@pytest.fixture
def mock_http():
    """RESPX mock router for HTTP mocking."""
    with respx.mock(assert_all_called=False) as router:
        yield router


# ─── Fetcher / Clock Doubles ─────────────────────────────────────


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher:
    """
    Fetcher returning scripted outcomes.

    Calls block on ``gate`` until it is set, which lets tests pile up
    concurrent callers before the fetch resolves.
    """

    def __init__(self, outcome: FetchOutcome | None = None, blocked: bool = False) -> None:
        self.outcome = outcome
        self.calls: list[str] = []
        self.gate = asyncio.Event()
        if not blocked:
            self.gate.set()
        self.error: Exception | None = None

    @property
    def name(self) -> str:
        return "fake"

    async def fetch(self, url: str) -> FetchOutcome:
        self.calls.append(url)
        await self.gate.wait()
        if self.error is not None:
            raise self.error
        if self.outcome is not None:
            return self.outcome
        return FetchSuccess(url=url, record=OgpRecord(title=f"Title of {url}"))

    async def close(self) -> None:
        pass


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def make_fetcher() -> type[FakeFetcher]:
    """Factory for fetchers with custom outcomes or a closed gate."""
    return FakeFetcher


@pytest.fixture
def failing_outcome() -> FetchFailure:
    return FetchFailure(
        url="https://broken.example.com/",
        kind=FailureKind.UPSTREAM_ERROR,
        message="404 Not Found",
        status_code=404,
    )


# ─── Sample Data Fixtures ────────────────────────────────────────


@pytest.fixture
def sample_og_html() -> str:
    """A page with a full set of og tags."""
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <title>Fallback Title</title>
        <meta name="description" content="Fallback description">
        <meta property="og:title" content="Example Article">
        <meta property="og:description" content="An article about examples.">
        <meta property="og:image" content="https://example.com/cover.png">
        <meta property="og:url" content="https://example.com/article">
        <meta property="og:site_name" content="Example Site">
    </head>
    <body><h1>Example Article</h1></body>
    </html>
    """


@pytest.fixture
def sample_plain_html() -> str:
    """A page without any og tags."""
    return """
    <html>
    <head>
        <title>  Plain Page  </title>
        <meta name="description" content="Plain description">
    </head>
    <body><p>Nothing social here.</p></body>
    </html>
    """
