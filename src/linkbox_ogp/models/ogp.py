"""OGP record and fetch outcome models."""

from enum import Enum
from typing import TYPE_CHECKING, Annotated, Literal, NoReturn

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from linkbox_ogp.exceptions import OgpFetchError


class OgpRecord(BaseModel):
    """
    Normalized Open Graph metadata extracted from a page.

    Every field is independently optional. On the wire the record uses the
    ``ogTitle``/``ogDescription``/``ogImage``/``ogUrl``/``ogSiteName`` keys.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    title: str | None = Field(default=None, alias="ogTitle")
    description: str | None = Field(default=None, alias="ogDescription")
    image_url: str | None = Field(default=None, alias="ogImage")
    canonical_url: str | None = Field(default=None, alias="ogUrl")
    site_name: str | None = Field(default=None, alias="ogSiteName")

    @property
    def is_empty(self) -> bool:
        """Return True if no field is present."""
        return all(
            value is None
            for value in (
                self.title,
                self.description,
                self.image_url,
                self.canonical_url,
                self.site_name,
            )
        )

    def to_wire(self) -> dict[str, str]:
        """Serialize with wire aliases, omitting absent fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class FailureKind(str, Enum):
    """Why a fetch did not produce a record."""

    INVALID_URL = "invalid_url"
    TIMEOUT = "timeout"
    UPSTREAM_ERROR = "upstream_error"
    NETWORK_ERROR = "network_error"


class FetchSuccess(BaseModel):
    """A fetch that produced a record."""

    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    url: str
    record: OgpRecord

    @property
    def ok(self) -> bool:
        """Return True; the fetch produced a record."""
        return True

    def unwrap(self) -> OgpRecord:
        """Return the record."""
        return self.record


class FetchFailure(BaseModel):
    """A fetch that failed, with the reason it failed."""

    model_config = ConfigDict(frozen=True)

    status: Literal["failure"] = "failure"
    url: str
    kind: FailureKind
    message: str
    status_code: int | None = None
    timeout_seconds: float | None = None

    @property
    def ok(self) -> bool:
        """Return False; the fetch did not produce a record."""
        return False

    def to_exception(self) -> "OgpFetchError":
        """Build the exception matching this failure kind."""
        from linkbox_ogp.exceptions import (
            FetchNetworkError,
            FetchTimeoutError,
            InvalidURLError,
            UpstreamHTTPError,
        )

        if self.kind is FailureKind.INVALID_URL:
            return InvalidURLError(self.url, self.message)
        if self.kind is FailureKind.TIMEOUT:
            return FetchTimeoutError(self.url, self.timeout_seconds or 0.0)
        if self.kind is FailureKind.UPSTREAM_ERROR:
            status_code = self.status_code or 502
            reason = self.message.removeprefix(str(status_code)).strip()
            return UpstreamHTTPError(self.url, status_code, reason)
        return FetchNetworkError(self.url, self.message)

    def unwrap(self) -> NoReturn:
        """Raise the exception matching this failure."""
        raise self.to_exception()


FetchOutcome = Annotated[FetchSuccess | FetchFailure, Field(discriminator="status")]
