"""Health check utilities for the server."""

from dataclasses import dataclass, field
from typing import Any

from linkbox_ogp import __version__
from linkbox_ogp.config import Settings, settings
from linkbox_ogp.utils.cache import OgpRequestCache


@dataclass
class HealthStatus:
    """Health status of a component."""

    name: str
    healthy: bool
    message: str = ""
    latency_ms: float = 0.0
    details: dict[str, Any] = field(default_factory=dict)


class HealthChecker:
    """
    Health checker for the application.

    Checks various components and returns overall health status.
    """

    def __init__(
        self,
        cache: OgpRequestCache | None = None,
        config: Settings | None = None,
    ) -> None:
        """
        Initialize the health checker.

        Args:
            cache: Application request cache, None before startup
            config: Settings to report on (defaults to the global settings)
        """
        self._cache = cache
        self._settings = config or settings

    async def check_cache(self) -> HealthStatus:
        """Report request cache occupancy."""
        if self._cache is None:
            return HealthStatus(
                name="cache",
                healthy=True,
                message="Cache not started",
                details={"started": False},
            )

        return HealthStatus(
            name="cache",
            healthy=True,
            message=f"{self._cache.size} entries, {self._cache.in_flight} in flight",
            details={
                "started": True,
                "enabled": self._cache.enabled,
                "size": self._cache.size,
                "in_flight": self._cache.in_flight,
                "ttl_seconds": self._cache.ttl_seconds,
            },
        )

    async def check_auth_configured(self) -> HealthStatus:
        """Check if the authenticated fetch_ogp tool can accept any caller."""
        configured = self._settings.is_auth_configured()

        # The public /api/ogp proxy works without tokens, so this is informational
        return HealthStatus(
            name="auth",
            healthy=True,
            message="Tokens configured" if configured else "No tokens configured",
            details={"configured": configured},
        )

    async def check_all(self) -> dict[str, Any]:
        """
        Run all health checks and return overall status.

        Returns:
            Dictionary with health status information
        """
        checks = [
            await self.check_cache(),
            await self.check_auth_configured(),
        ]

        all_healthy = all(check.healthy for check in checks)

        return {
            "healthy": all_healthy,
            "status": "healthy" if all_healthy else "unhealthy",
            "checks": {
                check.name: {
                    "healthy": check.healthy,
                    "message": check.message,
                    "latency_ms": check.latency_ms,
                    "details": check.details,
                }
                for check in checks
            },
            "version": __version__,
        }

    async def check_readiness(self) -> dict[str, Any]:
        """
        Check if the server is ready to accept requests.

        Ready once the request cache has been built by the lifespan.

        Returns:
            Dictionary with readiness status
        """
        ready = self._cache is not None

        return {
            "ready": ready,
            "status": "ready" if ready else "not_ready",
        }

    async def check_liveness(self) -> dict[str, Any]:
        """
        Check if the server is alive.

        This is a minimal check for Kubernetes liveness probes.

        Returns:
            Dictionary with liveness status
        """
        return {
            "alive": True,
            "status": "alive",
        }
