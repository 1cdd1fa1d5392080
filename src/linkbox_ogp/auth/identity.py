"""Caller identity for the authenticated fetch_ogp action."""

import hmac
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Identity:
    """An authenticated caller."""

    subject: str


@runtime_checkable
class IdentityProvider(Protocol):
    """Resolves a bearer token to an identity."""

    async def identify(self, token: str | None) -> Identity | None:
        """
        Resolve a token.

        Args:
            token: Bearer token sent by the caller, or None if absent

        Returns:
            The caller's identity, or None if the token is missing or unknown
        """
        ...


class StaticTokenIdentityProvider:
    """
    Identity provider backed by a fixed token table.

    Stands in for the external identity service; tokens come from
    ``Settings.auth_tokens``.
    """

    def __init__(self, tokens: Mapping[str, str]) -> None:
        """
        Initialize the provider.

        Args:
            tokens: Mapping of token -> subject
        """
        self._tokens = dict(tokens)

    @property
    def is_configured(self) -> bool:
        """Return True if any token is accepted."""
        return bool(self._tokens)

    async def identify(self, token: str | None) -> Identity | None:
        if not token:
            return None
        for known, subject in self._tokens.items():
            if hmac.compare_digest(known.encode(), token.encode()):
                return Identity(subject=subject)
        logger.info("unknown_token_rejected")
        return None


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
