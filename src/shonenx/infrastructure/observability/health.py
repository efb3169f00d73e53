"""Provider health probes."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from shonenx.config.settings import DEFAULT_REQUEST_TIMEOUT, ProviderSettings

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheck:
    """Result of a health check."""

    name: str
    status: HealthStatus
    message: str | None = None
    details: dict[str, Any] | None = None

    @property
    def is_healthy(self) -> bool:
        return self.status is HealthStatus.HEALTHY


async def check_provider_health(
    name: str, base_url: str, timeout: float = DEFAULT_REQUEST_TIMEOUT
) -> HealthCheck:
    """Check a REST provider by GETting its base URL.

    Args:
        name: Provider name for the report
        base_url: Provider base URL
        timeout: Request timeout in seconds

    Returns:
        Health check result (never raises)
    """
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.get(base_url)

        if response.status_code == 200:
            return HealthCheck(
                name=name,
                status=HealthStatus.HEALTHY,
                message=f"{name} is accessible",
                details={"url": base_url},
            )
        return HealthCheck(
            name=name,
            status=HealthStatus.DEGRADED,
            message=f"{name} returned status {response.status_code}",
            details={"url": base_url, "status_code": response.status_code},
        )

    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(
            "%s health check failed",
            name,
            extra={"error": str(e), "url": base_url},
        )
        return HealthCheck(
            name=name,
            status=HealthStatus.UNHEALTHY,
            message=f"{name} unreachable: {e}",
            details={"url": base_url},
        )


# Hey future me - this is a one-shot probe for diagnostics/settings screens. The service
# itself does NOT use it before each request; per-request fallback is the orchestrator's job.
async def select_working_api(settings: ProviderSettings) -> str:
    """Return the primary base URL if it answers 200, else the backup base URL."""
    primary = await check_provider_health("primary", settings.api_url, settings.request_timeout)
    if primary.is_healthy:
        logger.info("Primary API is up: %s", settings.api_url)
        return settings.api_url

    logger.warning(
        "Primary API unavailable (%s), switching to backup: %s",
        primary.message,
        settings.backup_api_url,
    )
    return settings.backup_api_url
