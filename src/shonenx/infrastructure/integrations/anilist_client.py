"""AniList GraphQL client for authenticated user operations."""

import asyncio
import json
import logging
from types import TracebackType
from typing import Any, cast

import httpx

from shonenx.config.settings import DEFAULT_ANILIST_GRAPHQL_URL, DEFAULT_REQUEST_TIMEOUT
from shonenx.domain.dtos import ProviderName
from shonenx.domain.exceptions import (
    GraphQLOperationError,
    ProviderDecodeError,
    ProviderNetworkError,
    ProviderStatusError,
    ProviderTimeoutError,
)
from shonenx.domain.ports import IGraphQLClient

logger = logging.getLogger(__name__)

_PROVIDER = ProviderName.ANILIST.value


class AnilistClient(IGraphQLClient):
    """HTTP client for the AniList GraphQL endpoint."""

    def __init__(
        self,
        endpoint: str = DEFAULT_ANILIST_GRAPHQL_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        """
        Initialize AniList client.

        Args:
            endpoint: GraphQL endpoint URL
            timeout: Per-call timeout in seconds
        """
        self.endpoint = endpoint
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AnilistClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # Hey future me, AniList answers 200 with {"errors": [...]} for most GraphQL-level
    # failures (bad variables, unknown media), but 400/401 with the same errors body for
    # auth problems. We look at "errors" first so the server's message survives either way.
    async def execute(
        self,
        document: str,
        variables: dict[str, Any] | None = None,
        access_token: str | None = None,
        operation_name: str = "",
    ) -> dict[str, Any]:
        """
        Execute a GraphQL query or mutation.

        Args:
            document: GraphQL document
            variables: Variable mapping
            access_token: Bearer token (omitted from headers when empty)
            operation_name: Operation name inside the document

        Returns:
            The `data` map of the response (empty dict when null)

        Raises:
            GraphQLOperationError: Response carries GraphQL errors
            ProviderTimeoutError: Timeout elapsed
            ProviderNetworkError: Transport failure
            ProviderStatusError: Non-200 status without GraphQL errors
            ProviderDecodeError: Malformed JSON
        """
        payload: dict[str, Any] = {"query": document, "variables": variables or {}}
        if operation_name:
            payload["operationName"] = operation_name

        headers: dict[str, str] = {}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        logger.debug("Executing %s with variables: %s", operation_name, variables)
        client = await self._get_client()

        try:
            response = await asyncio.wait_for(
                client.post(self.endpoint, json=payload, headers=headers),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise ProviderTimeoutError(
                f"{operation_name or 'GraphQL operation'} timed out after {self.timeout:.1f}s",
                _PROVIDER,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderNetworkError(
                f"{operation_name or 'GraphQL operation'} failed: {e}", _PROVIDER
            ) from e

        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            if response.status_code != 200:
                raise ProviderStatusError(
                    f"{operation_name} returned status {response.status_code}",
                    status_code=response.status_code,
                    provider=_PROVIDER,
                ) from e
            raise ProviderDecodeError(
                f"{operation_name} returned malformed JSON: {e}", _PROVIDER
            ) from e

        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            messages = "; ".join(
                str(err.get("message", err)) if isinstance(err, dict) else str(err)
                for err in errors
            )
            raise GraphQLOperationError(
                f"{operation_name} failed: {messages}",
                errors=cast(list[dict[str, Any]], errors),
                provider=_PROVIDER,
            )

        if response.status_code != 200:
            raise ProviderStatusError(
                f"{operation_name} returned status {response.status_code}",
                status_code=response.status_code,
                provider=_PROVIDER,
            )

        if not isinstance(body, dict):
            raise ProviderDecodeError(
                f"{operation_name} returned a non-object body", _PROVIDER
            )

        logger.debug("%s completed successfully", operation_name)
        return cast(dict[str, Any], body.get("data") or {})
