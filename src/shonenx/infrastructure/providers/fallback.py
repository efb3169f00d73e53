"""Primary -> backup fallback for the REST metadata providers.

Hey future me - this is the ONLY place that decides which REST provider answers!

FLOW:
    AnimeService
        │
        └─► FallbackOrchestrator.fetch(primary_url, backup_url)
                │
                ├─► Jikan (primary)
                │       └─► 200? → ProviderResponse(JIKAN, body)   ← backup never called
                │       └─► anything else? → log, next tier
                │
                └─► Kitsu (backup, fresh timeout window)
                        └─► 200? → ProviderResponse(KITSU, body)
                        └─► failure? → raise (no third tier)

Success means status 200, full stop. 404 and 503 are both "try the next tier".
"""

import logging

from shonenx.domain.dtos import ProviderName, ProviderResponse
from shonenx.domain.ports import IRestClient

logger = logging.getLogger(__name__)


class FallbackOrchestrator:
    """Two-tier fallback over a REST client.

    Stateless apart from the client it wraps: concurrent callers each get their
    own round trips, nothing is cached or deduplicated.
    """

    def __init__(
        self,
        client: IRestClient,
        primary: ProviderName = ProviderName.JIKAN,
        backup: ProviderName = ProviderName.KITSU,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            client: REST client used for both tiers
            primary: Provider tag for the primary tier
            backup: Provider tag for the backup tier
        """
        self._client = client
        self.primary = primary
        self.backup = backup

    async def fetch(self, primary_url: str, backup_url: str) -> ProviderResponse:
        """
        GET primary, fall back to backup on any failure.

        Args:
            primary_url: Fully-formed URL for the primary provider
            backup_url: Same logical query against the backup provider

        Returns:
            Decoded body tagged with the provider that answered

        Raises:
            ExternalServiceError: Backup failed too (the backup's own error)
        """
        try:
            logger.debug("Trying primary API: %s", primary_url)
            body = await self._client.get_json(primary_url, self.primary)
            return ProviderResponse(provider=self.primary, body=body, url=primary_url)
        except Exception as e:
            # Any exception counts as a primary failure.
            logger.warning(
                "Primary API failed: %s. Trying backup...",
                e,
                extra={"provider": self.primary, "url": primary_url},
            )

        # Backup failures propagate - the facade decides what "empty" looks like.
        logger.debug("Trying backup API: %s", backup_url)
        try:
            body = await self._client.get_json(backup_url, self.backup)
        except Exception:
            logger.error(
                "Backup API failed as well: %s",
                backup_url,
                extra={"provider": self.backup, "url": backup_url},
            )
            raise
        return ProviderResponse(provider=self.backup, body=body, url=backup_url)
