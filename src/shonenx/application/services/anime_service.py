"""Anime Metadata Aggregation Service.

Hey future me - this is the ONE entry point the UI calls for anime data!

Architecture:
    AnimeService
        │
        ├─► public feeds / search / details
        │       └─► FallbackOrchestrator (Jikan → Kitsu)
        │               └─► normalize(item, response.provider) → CanonicalMedia
        │
        └─► authenticated list/favourite/status operations
                └─► AnilistClient (GraphQL, bearer token from AuthContext)
                        └─► normalize_anilist_media → CanonicalMedia

Two error policies, on purpose:
- Public reads FAIL SOFT: any failure becomes [] (or a blank CanonicalMedia) + an ERROR log.
  A feed screen shows "no results" instead of crashing.
- Authenticated operations follow the ErrorPolicy in their GraphQLOperation entry.
  Reads PROPAGATE (wrapped in AnimeServiceError), UI-triggered mutations LOG_AND_SWALLOW.
  Invalid statuses ALWAYS raise, before any network call.

No auth context → type-appropriate empty value, zero network calls.

Usage:
    service = AnimeService(ProviderSettings(), auth_provider=auth_notifier.current_context)
    results = await service.search_anime("Naruto")
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from types import TracebackType
from typing import Any, TypeVar
from urllib.parse import quote

from shonenx.config.settings import ProviderSettings
from shonenx.domain.dtos import (
    AuthContext,
    AuthContextProvider,
    CanonicalMedia,
    MediaListCollection,
    MediaListStatusInfo,
    ProviderName,
)
from shonenx.domain.exceptions import AnimeServiceError, GraphQLOperationError
from shonenx.domain.ports import IAnimeRepository, IGraphQLClient, IRestClient
from shonenx.domain.value_objects import validate_media_list_status
from shonenx.infrastructure.integrations import anilist_queries
from shonenx.infrastructure.integrations.anilist_client import AnilistClient
from shonenx.infrastructure.integrations.rest_client import RestClient
from shonenx.infrastructure.observability.logging import correlation_scope
from shonenx.infrastructure.providers.fallback import FallbackOrchestrator
from shonenx.infrastructure.providers.normalizers import (
    extract_item,
    extract_items,
    normalize,
    normalize_anilist_media,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorPolicy(str, Enum):
    """What an authenticated operation does when it fails after validation."""

    PROPAGATE = "propagate"  # wrap in AnimeServiceError and raise
    LOG_AND_SWALLOW = "log_and_swallow"  # log and return the empty value


@dataclass(frozen=True)
class GraphQLOperation:
    """A named AniList operation and how its failures are handled."""

    name: str
    document: str
    policy: ErrorPolicy
    is_mutation: bool = False


GET_USER_ANIME_LIST = GraphQLOperation(
    "GetUserAnimeList", anilist_queries.USER_ANIME_LIST_QUERY, ErrorPolicy.PROPAGATE
)
GET_FAVORITES = GraphQLOperation(
    "GetFavorites", anilist_queries.USER_FAVORITES_QUERY, ErrorPolicy.PROPAGATE
)
IS_ANIME_FAVORITE = GraphQLOperation(
    "IsAnimeFavorite", anilist_queries.IS_ANIME_FAVORITE_QUERY, ErrorPolicy.PROPAGATE
)
GET_ANIME_STATUS = GraphQLOperation(
    "GetAnimeStatus", anilist_queries.GET_ANIME_STATUS_QUERY, ErrorPolicy.PROPAGATE
)
TOGGLE_FAVORITE = GraphQLOperation(
    "ToggleFavorite",
    anilist_queries.TOGGLE_FAVORITE_MUTATION,
    ErrorPolicy.LOG_AND_SWALLOW,
    is_mutation=True,
)
SAVE_MEDIA_PROGRESS = GraphQLOperation(
    "SaveMediaProgress",
    anilist_queries.SAVE_MEDIA_PROGRESS_MUTATION,
    ErrorPolicy.LOG_AND_SWALLOW,
    is_mutation=True,
)
UPDATE_ANIME_STATUS = GraphQLOperation(
    "UpdateAnimeStatus",
    anilist_queries.UPDATE_ANIME_STATUS_MUTATION,
    ErrorPolicy.LOG_AND_SWALLOW,
    is_mutation=True,
)
DELETE_ANIME_ENTRY = GraphQLOperation(
    "DeleteAnimeEntry",
    anilist_queries.DELETE_ANIME_ENTRY_MUTATION,
    ErrorPolicy.LOG_AND_SWALLOW,
    is_mutation=True,
)

# Single audit point for the throw/swallow split.
GRAPHQL_OPERATIONS: dict[str, GraphQLOperation] = {
    op.name: op
    for op in (
        GET_USER_ANIME_LIST,
        GET_FAVORITES,
        IS_ANIME_FAVORITE,
        GET_ANIME_STATUS,
        TOGGLE_FAVORITE,
        SAVE_MEDIA_PROGRESS,
        UPDATE_ANIME_STATUS,
        DELETE_ANIME_ENTRY,
    )
}


def _dig(data: Any, *keys: str) -> Any:
    """Walk nested maps, None as soon as a level is missing."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _parse_media_nodes(nodes: Any) -> list[CanonicalMedia]:
    if not isinstance(nodes, list):
        return []
    return [normalize_anilist_media(node) for node in nodes if isinstance(node, dict)]


class AnimeService(IAnimeRepository):
    """Facade over the REST providers and the AniList GraphQL API."""

    def __init__(
        self,
        settings: ProviderSettings | None = None,
        auth_provider: AuthContextProvider | None = None,
        rest_client: IRestClient | None = None,
        graphql_client: IGraphQLClient | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            settings: Provider URLs and timeout (explicit > env > defaults)
            auth_provider: Callable returning the current AuthContext (or None)
            rest_client: REST transport, defaults to RestClient(settings.request_timeout)
            graphql_client: GraphQL transport, defaults to AnilistClient
        """
        self.settings = settings or ProviderSettings()
        self._auth_provider: AuthContextProvider = auth_provider or (lambda: None)
        self._rest = rest_client or RestClient(timeout=self.settings.request_timeout)
        self._graphql = graphql_client or AnilistClient(
            endpoint=self.settings.anilist_graphql_url,
            timeout=self.settings.request_timeout,
        )
        self._orchestrator = FallbackOrchestrator(self._rest)

    @property
    def name(self) -> str:
        return "Anilist"

    async def close(self) -> None:
        """Close both HTTP transports."""
        await self._rest.close()
        await self._graphql.close()

    async def __aenter__(self) -> "AnimeService":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # =========================================================================
    # URL building
    # =========================================================================

    def _primary(self, path: str) -> str:
        return f"{self.settings.api_url}{path}"

    def _backup(self, path: str) -> str:
        return f"{self.settings.backup_api_url}{path}"

    # =========================================================================
    # Public (unauthenticated) operations - FAIL SOFT
    # =========================================================================

    async def _fetch_media_list(
        self, operation: str, primary_url: str, backup_url: str
    ) -> list[CanonicalMedia]:
        with correlation_scope():
            try:
                response = await self._orchestrator.fetch(primary_url, backup_url)
                return [
                    normalize(item, response.provider)
                    for item in extract_items(response.body)
                ]
            except Exception:
                logger.error(
                    "%s failed", operation, exc_info=True, extra={"operation": operation}
                )
                return []

    # Hey future me - per_page is accepted for interface parity with AniList-style
    # paging, but neither REST provider gets it: Jikan and Kitsu use their own page
    # sizes and we return what they return, in their order.
    async def search_anime(
        self, title: str, page: int = 1, per_page: int = 10
    ) -> list[CanonicalMedia]:
        """Search anime by title."""
        encoded = quote(title, safe="")
        return await self._fetch_media_list(
            "searchAnime",
            self._primary(f"/anime?q={encoded}&page={page}"),
            self._backup(f"/anime?filter[text]={encoded}&page[{page}]"),
        )

    async def get_trending_anime(self) -> list[CanonicalMedia]:
        return await self._fetch_media_list(
            "getTrendingAnime",
            self._primary("/top/anime"),
            self._backup("/trending/anime"),
        )

    async def get_popular_anime(self) -> list[CanonicalMedia]:
        return await self._fetch_media_list(
            "getPopularAnime", self._primary("/top/anime"), self._backup("/anime")
        )

    async def get_top_rated_anime(self) -> list[CanonicalMedia]:
        return await self._fetch_media_list(
            "getTopRatedAnime", self._primary("/top/anime"), self._backup("/anime")
        )

    async def get_recently_updated_anime(self) -> list[CanonicalMedia]:
        return await self._fetch_media_list(
            "getRecentlyUpdatedAnime",
            self._primary("/seasons/now"),
            self._backup("/anime"),
        )

    async def get_most_favorite_anime(self) -> list[CanonicalMedia]:
        """No "most favourited" endpoint anywhere - approximated by top rated."""
        return await self.get_top_rated_anime()

    async def get_most_watched_anime(self) -> list[CanonicalMedia]:
        """No "most watched" endpoint anywhere - approximated by trending."""
        return await self.get_trending_anime()

    async def get_upcoming_anime(self) -> list[CanonicalMedia]:
        return await self._fetch_media_list(
            "getUpcomingAnime",
            self._primary("/seasons/upcoming"),
            self._backup("/anime"),
        )

    async def get_anime_details(self, anime_id: int) -> CanonicalMedia:
        """Single anime by id. Blank CanonicalMedia on any failure."""
        with correlation_scope():
            try:
                response = await self._orchestrator.fetch(
                    self._primary(f"/anime/{anime_id}"),
                    self._backup(f"/anime/{anime_id}"),
                )
                item = extract_item(response.body)
                if item is None:
                    return CanonicalMedia()
                return normalize(item, response.provider)
            except Exception:
                logger.error("getAnimeDetails(%s) failed", anime_id, exc_info=True)
                return CanonicalMedia()

    # =========================================================================
    # Authenticated operations - GraphQL, per-operation ErrorPolicy
    # =========================================================================

    def _get_auth_context(self, operation: str) -> AuthContext | None:
        auth = self._auth_provider()
        if auth is None or not auth.is_valid:
            logger.warning("%s requires a logged-in Anilist user.", operation)
            return None
        return auth

    async def _run_operation(
        self,
        operation: GraphQLOperation,
        auth: AuthContext,
        variables: dict[str, Any],
        parse: Callable[[dict[str, Any]], T],
        empty: T,
    ) -> T:
        """Execute an operation and apply its ErrorPolicy to any failure.

        `parse` runs inside the guarded block, so a payload that fails its
        checks is handled exactly like a transport or GraphQL error.
        """
        with correlation_scope():
            logger.debug(
                "Running %s %s",
                "mutation" if operation.is_mutation else "query",
                operation.name,
            )
            try:
                data = await self._graphql.execute(
                    operation.document,
                    variables,
                    access_token=auth.access_token,
                    operation_name=operation.name,
                )
                return parse(data)
            except Exception as e:
                logger.error(
                    "Operation %s failed",
                    operation.name,
                    exc_info=True,
                    extra={"operation": operation.name, "provider": ProviderName.ANILIST},
                )
                if operation.policy is ErrorPolicy.PROPAGATE:
                    if isinstance(e, AnimeServiceError):
                        raise
                    raise AnimeServiceError(operation.name, e) from e
                return empty

    async def get_user_anime_list(
        self, type: str = "ANIME", status: str = "CURRENT"
    ) -> MediaListCollection:
        """User's lists for a media type and status."""
        auth = self._get_auth_context(GET_USER_ANIME_LIST.name)
        if auth is None:
            return MediaListCollection()

        return await self._run_operation(
            GET_USER_ANIME_LIST,
            auth,
            {"userId": auth.user_id, "status": status, "type": type},
            lambda data: MediaListCollection.from_graphql(data, normalize_anilist_media),
            MediaListCollection(),
        )

    async def get_favorites(self) -> list[CanonicalMedia]:
        """User's favourite anime."""
        auth = self._get_auth_context(GET_FAVORITES.name)
        if auth is None:
            return []

        return await self._run_operation(
            GET_FAVORITES,
            auth,
            {"userId": auth.user_id},
            lambda data: _parse_media_nodes(_dig(data, "User", "favourites", "anime", "nodes")),
            [],
        )

    async def toggle_favorite(self, anime_id: int) -> list[CanonicalMedia]:
        """Toggle favourite; returns the updated favourites (or [] on failure)."""
        auth = self._get_auth_context(TOGGLE_FAVORITE.name)
        if auth is None:
            return []

        return await self._run_operation(
            TOGGLE_FAVORITE,
            auth,
            {"animeId": anime_id},
            lambda data: _parse_media_nodes(_dig(data, "ToggleFavourite", "anime", "nodes")),
            [],
        )

    async def save_media_progress(self, media_id: int, episode_number: int) -> None:
        """Record watched episode count. Best effort, never raises."""
        auth = self._get_auth_context(SAVE_MEDIA_PROGRESS.name)
        if auth is None:
            return

        def _check(data: dict[str, Any]) -> None:
            if data.get("SaveMediaListEntry") is None:
                raise GraphQLOperationError(
                    f"Failed to save progress for mediaId: {media_id}"
                )

        await self._run_operation(
            SAVE_MEDIA_PROGRESS,
            auth,
            {"mediaId": media_id, "progress": episode_number},
            _check,
            None,
        )

    async def is_anime_favorite(self, anime_id: int) -> bool:
        auth = self._get_auth_context(IS_ANIME_FAVORITE.name)
        if auth is None:
            return False

        return await self._run_operation(
            IS_ANIME_FAVORITE,
            auth,
            {"animeId": anime_id},
            lambda data: _dig(data, "Media", "isFavourite") is True,
            False,
        )

    async def update_anime_status(self, media_id: int, new_status: str) -> None:
        """Set list status. Invalid status raises; network failures are only logged.

        Raises:
            InvalidMediaListStatusError: new_status isn't a MediaListStatus value
        """
        status = validate_media_list_status(new_status)

        auth = self._get_auth_context(UPDATE_ANIME_STATUS.name)
        if auth is None:
            return

        def _check(data: dict[str, Any]) -> None:
            if data.get("SaveMediaListEntry") is None:
                raise GraphQLOperationError(
                    f"Failed to update anime status for mediaId: {media_id}"
                )

        await self._run_operation(
            UPDATE_ANIME_STATUS,
            auth,
            {"mediaId": media_id, "status": status.value},
            _check,
            None,
        )

    async def delete_anime_entry(self, entry_id: int) -> None:
        """Delete a list entry. Best effort, never raises."""
        auth = self._get_auth_context(DELETE_ANIME_ENTRY.name)
        if auth is None:
            return

        def _check(data: dict[str, Any]) -> None:
            if _dig(data, "DeleteMediaListEntry", "deleted") is not True:
                raise GraphQLOperationError(
                    f"Failed to delete anime entry with id: {entry_id}"
                )

        await self._run_operation(
            DELETE_ANIME_ENTRY,
            auth,
            {"id": entry_id},
            _check,
            None,
        )

    async def get_anime_status(self, anime_id: int) -> MediaListStatusInfo | None:
        """Current user's list entry id + status for an anime, None if not listed."""
        auth = self._get_auth_context(GET_ANIME_STATUS.name)
        if auth is None:
            return None

        def _parse(data: dict[str, Any]) -> MediaListStatusInfo | None:
            entry = data.get("MediaList")
            if not isinstance(entry, dict):
                return None
            return MediaListStatusInfo(
                entry_id=int(entry.get("id") or 0), status=entry.get("status")
            )

        return await self._run_operation(
            GET_ANIME_STATUS,
            auth,
            {"userId": auth.user_id, "animeId": anime_id},
            _parse,
            None,
        )
