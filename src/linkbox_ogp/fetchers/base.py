"""Base protocol for OGP fetchers."""

from abc import abstractmethod
from typing import Protocol, runtime_checkable

from linkbox_ogp.models.ogp import FetchOutcome


@runtime_checkable
class OgpFetcher(Protocol):
    """
    Protocol for OGP fetchers.

    A fetcher resolves one URL to a FetchOutcome. Failures are returned as
    FetchFailure values, never raised.
    """

    @property
    def name(self) -> str:
        """Return the fetcher name."""
        ...

    @abstractmethod
    async def fetch(self, url: str) -> FetchOutcome:
        """
        Fetch a URL and extract its Open Graph metadata.

        Args:
            url: Absolute http(s) URL

        Returns:
            FetchSuccess with the record, or FetchFailure with the reason
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the fetcher and release resources."""
        ...
