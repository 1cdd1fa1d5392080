"""OGP fetchers."""

from linkbox_ogp.fetchers.base import OgpFetcher
from linkbox_ogp.fetchers.ogp_fetcher import OgpFetchService, validate_url
from linkbox_ogp.fetchers.proxy_client import OgpProxyClient

__all__ = ["OgpFetcher", "OgpFetchService", "OgpProxyClient", "validate_url"]
