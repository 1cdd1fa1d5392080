"""Bookmark card preview model."""

from pydantic import BaseModel, Field


class CardPreview(BaseModel):
    """What a bookmark card displays once OGP data has been merged in."""

    title: str | None = Field(default=None, description="Display title")
    description: str | None = Field(default=None, description="Display description")
    image_url: str | None = Field(default=None, description="Preview image, OGP only")
    site_name: str | None = Field(default=None, description="Site name, OGP only")
    is_loading: bool = Field(default=False, description="OGP data still being fetched")
    from_ogp: bool = Field(default=False, description="Whether any OGP field was used")

    model_config = {"extra": "ignore"}
