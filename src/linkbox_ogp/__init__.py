"""Open Graph preview fetching and caching for linkbox bookmarks."""

__version__ = "0.1.0"
