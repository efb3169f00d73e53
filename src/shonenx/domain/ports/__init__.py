"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from typing import Any

from shonenx.domain.dtos import (
    CanonicalMedia,
    MediaListCollection,
    MediaListStatusInfo,
    ProviderName,
)


class IRestClient(ABC):
    """Single-shot JSON GET against a REST provider."""

    @abstractmethod
    async def get_json(self, url: str, provider: ProviderName | None = None) -> Any:
        """
        GET a fully-formed URL and decode the JSON body.

        Args:
            url: URL with query parameters already encoded
            provider: Provider name, used for error attribution and logs

        Returns:
            Decoded JSON (dict, list or scalar)

        Raises:
            ProviderTimeoutError: Call exceeded the timeout
            ProviderNetworkError: Connection-level failure
            ProviderStatusError: Status code other than 200
            ProviderDecodeError: Body is not JSON
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying HTTP client."""
        pass


class IGraphQLClient(ABC):
    """Authenticated GraphQL transport."""

    @abstractmethod
    async def execute(
        self,
        document: str,
        variables: dict[str, Any] | None = None,
        access_token: str | None = None,
        operation_name: str = "",
    ) -> dict[str, Any]:
        """
        Run a query or mutation and return its `data` map.

        Raises:
            GraphQLOperationError: Server reported errors
            ExternalServiceError: Transport failure (same subclasses as IRestClient)
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying HTTP client."""
        pass


class IAnimeRepository(ABC):
    """Port the UI layer talks to for anime metadata and tracking."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable repository name."""
        pass

    @abstractmethod
    async def search_anime(
        self, title: str, page: int = 1, per_page: int = 10
    ) -> list[CanonicalMedia]:
        pass

    @abstractmethod
    async def get_trending_anime(self) -> list[CanonicalMedia]:
        pass

    @abstractmethod
    async def get_popular_anime(self) -> list[CanonicalMedia]:
        pass

    @abstractmethod
    async def get_top_rated_anime(self) -> list[CanonicalMedia]:
        pass

    @abstractmethod
    async def get_recently_updated_anime(self) -> list[CanonicalMedia]:
        pass

    @abstractmethod
    async def get_most_favorite_anime(self) -> list[CanonicalMedia]:
        pass

    @abstractmethod
    async def get_most_watched_anime(self) -> list[CanonicalMedia]:
        pass

    @abstractmethod
    async def get_upcoming_anime(self) -> list[CanonicalMedia]:
        pass

    @abstractmethod
    async def get_anime_details(self, anime_id: int) -> CanonicalMedia:
        pass

    @abstractmethod
    async def get_user_anime_list(self, type: str, status: str) -> MediaListCollection:
        pass

    @abstractmethod
    async def get_favorites(self) -> list[CanonicalMedia]:
        pass

    @abstractmethod
    async def toggle_favorite(self, anime_id: int) -> list[CanonicalMedia]:
        pass

    @abstractmethod
    async def save_media_progress(self, media_id: int, episode_number: int) -> None:
        pass

    @abstractmethod
    async def is_anime_favorite(self, anime_id: int) -> bool:
        pass

    @abstractmethod
    async def update_anime_status(self, media_id: int, new_status: str) -> None:
        pass

    @abstractmethod
    async def delete_anime_entry(self, entry_id: int) -> None:
        pass

    @abstractmethod
    async def get_anime_status(self, anime_id: int) -> MediaListStatusInfo | None:
        pass


__all__ = ["IAnimeRepository", "IGraphQLClient", "IRestClient"]
