"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we keep message as an attribute so callers can inspect it without
    # parsing str(exception). Don't raise this directly - pick a subclass so callers can
    # catch precisely (provider failures vs. bad input vs. authenticated-operation errors).
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(DomainException):
    """Input validation failed.

    Raised for programmer errors (bad status strings, malformed provider items),
    never for environmental failures.
    """

    pass


class InvalidMediaListStatusError(ValidationError):
    """Raised when a media list status is not one of the AniList enum values."""

    def __init__(self, status: str, valid_statuses: tuple[str, ...]) -> None:
        super().__init__(
            f"Invalid MediaListStatus: {status!r}. Valid values: {', '.join(valid_statuses)}"
        )
        self.status = status
        self.valid_statuses = valid_statuses


class NormalizationError(ValidationError):
    """Raised when a provider item is not a JSON object at all.

    Missing optional fields never raise - they map to defaults. Only a top-level
    shape that isn't a mapping ends up here.
    """

    pass


class ExternalServiceError(DomainException):
    """External provider (Jikan, Kitsu, AniList) call failed.

    Every provider-client failure is one of the subclasses below so the fallback
    orchestrator (and tests) can tell a timeout from a 503 from garbage JSON.
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider


class ProviderNetworkError(ExternalServiceError):
    """Connection-level failure (DNS, refused, reset)."""

    pass


class ProviderTimeoutError(ExternalServiceError):
    """The call did not finish inside the per-call timeout."""

    pass


class ProviderStatusError(ExternalServiceError):
    """Provider answered with anything other than 200."""

    def __init__(self, message: str, status_code: int, provider: str | None = None) -> None:
        super().__init__(message, provider)
        self.status_code = status_code


class ProviderDecodeError(ExternalServiceError):
    """Provider answered 200 but the body isn't valid JSON."""

    pass


class GraphQLOperationError(ExternalServiceError):
    """GraphQL server reported errors for the operation."""

    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]] | None = None,
        provider: str | None = None,
    ) -> None:
        super().__init__(message, provider)
        self.errors = errors or []


class AnimeServiceError(DomainException):
    """An authenticated anime-service operation failed.

    This is the ONE error kind callers of the authenticated API see. It names the
    GraphQL operation and keeps the underlying exception as .cause (also chained
    via __cause__).
    """

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        message = f"Failed to execute {operation}"
        if cause is not None:
            message = f"{message} ({cause})"
        super().__init__(message)
        self.operation = operation
        self.cause = cause


__all__ = [
    "AnimeServiceError",
    "DomainException",
    "ExternalServiceError",
    "GraphQLOperationError",
    "InvalidMediaListStatusError",
    "NormalizationError",
    "ProviderDecodeError",
    "ProviderNetworkError",
    "ProviderStatusError",
    "ProviderTimeoutError",
    "ValidationError",
]
