"""MCP tools for linkbox-ogp."""

from linkbox_ogp.tools.registration import register_all_tools

__all__ = ["register_all_tools"]
