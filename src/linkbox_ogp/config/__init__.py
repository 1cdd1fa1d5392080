"""Configuration for linkbox-ogp."""

from linkbox_ogp.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
