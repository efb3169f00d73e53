"""Observability infrastructure: structured logging and provider health probes."""

from shonenx.infrastructure.observability.health import (
    HealthCheck,
    HealthStatus,
    check_provider_health,
    select_working_api,
)
from shonenx.infrastructure.observability.logging import (
    configure_logging,
    correlation_scope,
    get_correlation_id,
    set_correlation_id,
)

__all__ = [
    "HealthCheck",
    "HealthStatus",
    "check_provider_health",
    "configure_logging",
    "correlation_scope",
    "get_correlation_id",
    "select_working_api",
    "set_correlation_id",
]
