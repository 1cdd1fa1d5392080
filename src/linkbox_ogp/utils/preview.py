"""Merge OGP data into what a bookmark card shows."""

from linkbox_ogp.models.ogp import FetchOutcome
from linkbox_ogp.models.preview import CardPreview


def build_card_preview(
    title: str | None,
    memo: str | None,
    outcome: FetchOutcome | None,
    loading: bool = False,
) -> CardPreview:
    """
    Build a card preview from a bookmark and its OGP outcome.

    OGP title and description win when non-empty; otherwise the bookmark's
    own title and memo are shown. A failed or missing outcome never blocks
    the card, it just leaves the OGP-only fields (image, site name) empty.

    Args:
        title: Bookmark title as saved by the user
        memo: Bookmark memo
        outcome: Result of the OGP fetch, or None if not available yet
        loading: Whether the fetch is still running

    Returns:
        CardPreview to render
    """
    if outcome is None or not outcome.ok:
        return CardPreview(title=title, description=memo, is_loading=loading)

    record = outcome.record
    return CardPreview(
        title=record.title or title,
        description=record.description or memo,
        image_url=record.image_url or None,
        site_name=record.site_name or None,
        is_loading=loading,
        from_ogp=bool(record.title or record.description or record.image_url),
    )
