"""Pydantic models for linkbox-ogp."""

from linkbox_ogp.models.ogp import (
    FailureKind,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    OgpRecord,
)
from linkbox_ogp.models.preview import CardPreview

__all__ = [
    "CardPreview",
    "FailureKind",
    "FetchFailure",
    "FetchOutcome",
    "FetchSuccess",
    "OgpRecord",
]
