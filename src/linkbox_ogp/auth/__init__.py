"""Caller authentication."""

from linkbox_ogp.auth.identity import (
    Identity,
    IdentityProvider,
    StaticTokenIdentityProvider,
    bearer_token,
)

__all__ = ["Identity", "IdentityProvider", "StaticTokenIdentityProvider", "bearer_token"]
