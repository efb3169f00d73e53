"""Plain JSON-over-HTTP client for the REST metadata providers."""

import asyncio
import json
import logging
from types import TracebackType
from typing import Any

import httpx

from shonenx.config.settings import DEFAULT_REQUEST_TIMEOUT
from shonenx.domain.dtos import ProviderName
from shonenx.domain.exceptions import (
    ProviderDecodeError,
    ProviderNetworkError,
    ProviderStatusError,
    ProviderTimeoutError,
)
from shonenx.domain.ports import IRestClient

logger = logging.getLogger(__name__)


class RestClient(IRestClient):
    """HTTP client issuing one GET per call with a hard timeout.

    No retries here! Retry/fallback policy lives one level up in the
    FallbackOrchestrator. This class only turns every way a call can go wrong
    into its own exception type.
    """

    def __init__(self, timeout: float = DEFAULT_REQUEST_TIMEOUT) -> None:
        """
        Initialize REST client.

        Args:
            timeout: Per-call timeout in seconds, covering connect + read + decode
        """
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"Accept": "application/json"},
                timeout=self.timeout,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RestClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # Hey future me, httpx timeouts are per-phase (connect, read, ...), so a slow-drip
    # server could keep us busy far longer than 5s. wait_for bounds the WHOLE call.
    # Both timeout flavours end up as ProviderTimeoutError.
    async def get_json(self, url: str, provider: ProviderName | None = None) -> Any:
        """
        GET a URL and decode its JSON body.

        Args:
            url: Fully-formed URL (query already encoded)
            provider: Provider the URL belongs to (for error attribution)

        Returns:
            Decoded JSON body

        Raises:
            ProviderTimeoutError: Timeout elapsed
            ProviderNetworkError: Transport failure
            ProviderStatusError: Status other than 200
            ProviderDecodeError: Malformed JSON
        """
        provider_name = provider.value if provider else None
        logger.debug("GET %s (provider=%s)", url, provider_name)
        client = await self._get_client()

        try:
            response = await asyncio.wait_for(client.get(url), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise ProviderTimeoutError(
                f"GET {url} timed out after {self.timeout:.1f}s", provider_name
            ) from e
        except httpx.HTTPError as e:
            raise ProviderNetworkError(f"GET {url} failed: {e}", provider_name) from e

        if response.status_code != 200:
            raise ProviderStatusError(
                f"GET {url} returned status {response.status_code}",
                status_code=response.status_code,
                provider=provider_name,
            )

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProviderDecodeError(
                f"GET {url} returned malformed JSON: {e}", provider_name
            ) from e
