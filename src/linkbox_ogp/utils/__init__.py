"""Utility modules for linkbox-ogp."""

from linkbox_ogp.utils.cache import CacheEntry, EntryState, OgpRequestCache
from linkbox_ogp.utils.ogp_extractor import extract_ogp
from linkbox_ogp.utils.preview import build_card_preview

__all__ = [
    "CacheEntry",
    "EntryState",
    "OgpRequestCache",
    "extract_ogp",
    "build_card_preview",
]
