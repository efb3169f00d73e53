"""Tests for AnimeService."""

from unittest.mock import AsyncMock

import pytest
from pytest_mock import MockerFixture

from shonenx.application.services.anime_service import (
    GRAPHQL_OPERATIONS,
    AnimeService,
    ErrorPolicy,
)
from shonenx.config.settings import ProviderSettings
from shonenx.domain.dtos import (
    AuthContext,
    CanonicalMedia,
    MediaListStatusInfo,
    ProviderName,
    ProviderResponse,
)
from shonenx.domain.exceptions import (
    AnimeServiceError,
    GraphQLOperationError,
    InvalidMediaListStatusError,
    ProviderNetworkError,
    ProviderStatusError,
    ProviderTimeoutError,
)
from shonenx.domain.ports import IGraphQLClient, IRestClient
from shonenx.infrastructure.integrations import anilist_queries

API = "https://api.jikan.moe/v4"
BACKUP = "https://kitsu.io/api/edge"

NARUTO_JIKAN = {
    "mal_id": 20,
    "title": "Naruto",
    "title_english": "Naruto",
    "title_japanese": "ナルト",
    "images": {"jpg": {"image_url": "https://cdn.myanimelist.net/images/anime/13/17405.jpg"}},
    "synopsis": "Moments prior to Naruto Uzumaki's birth...",
    "score": 7.95,
    "episodes": 220,
    "aired": {"from": "2002-10-03T00:00:00+00:00"},
    "genres": [{"name": "Action"}],
}

NARUTO_KITSU = {
    "id": "11",
    "type": "anime",
    "attributes": {
        "canonicalTitle": "Naruto",
        "titles": {"en": "Naruto", "ja_jp": "ナルト"},
        "posterImage": {"large": "https://media.kitsu.io/anime/11/large.jpg"},
        "averageRating": "79.8",
        "episodeCount": 220,
        "startDate": "2002-10-03",
    },
}

ANILIST_MEDIA = {
    "id": 20,
    "title": {"romaji": "Naruto", "english": "Naruto", "native": "ナルト"},
    "coverImage": {"large": "https://anilist/20.jpg"},
    "averageScore": 79,
    "episodes": 220,
    "genres": ["Action"],
}


@pytest.fixture
def settings() -> ProviderSettings:
    return ProviderSettings(api_url=API, backup_api_url=BACKUP, _env_file=None)


@pytest.fixture
def rest_client() -> AsyncMock:
    """Create a mock REST client."""
    return AsyncMock(spec=IRestClient)


@pytest.fixture
def graphql_client() -> AsyncMock:
    """Create a mock GraphQL client."""
    return AsyncMock(spec=IGraphQLClient)


@pytest.fixture
def auth() -> AuthContext:
    return AuthContext(user_id=42, access_token="token-abc")


@pytest.fixture
def service(
    settings: ProviderSettings,
    rest_client: AsyncMock,
    graphql_client: AsyncMock,
    auth: AuthContext,
) -> AnimeService:
    """Create a service with a logged-in user."""
    return AnimeService(
        settings,
        auth_provider=lambda: auth,
        rest_client=rest_client,
        graphql_client=graphql_client,
    )


@pytest.fixture
def anonymous_service(
    settings: ProviderSettings, rest_client: AsyncMock, graphql_client: AsyncMock
) -> AnimeService:
    """Create a service with no logged-in user."""
    return AnimeService(settings, rest_client=rest_client, graphql_client=graphql_client)


def requested_urls(rest_client: AsyncMock) -> list[str]:
    return [c.args[0] for c in rest_client.get_json.await_args_list]


class TestSearchAndFeeds:
    """Test unauthenticated reads with fallback."""

    async def test_naruto_end_to_end(
        self, service: AnimeService, rest_client: AsyncMock
    ) -> None:
        """Test the minimal Jikan search payload end to end."""
        rest_client.get_json.return_value = {
            "data": [{"mal_id": 20, "title": "Naruto", "score": 7.95, "episodes": 220}]
        }

        results = await service.search_anime("Naruto")

        assert len(results) == 1
        assert results[0].to_dict()["id"] == 20
        assert results[0].title.romaji == "Naruto"
        assert results[0].average_score == 79
        assert results[0].episode_count == 220
        assert results[0].genres == []
        assert rest_client.get_json.await_count == 1

    async def test_search_primary_success(
        self, service: AnimeService, rest_client: AsyncMock
    ) -> None:
        """Test that a primary 200 is normalized and the backup is never called."""
        rest_client.get_json.return_value = {"data": [NARUTO_JIKAN]}

        results = await service.search_anime("Naruto")

        assert len(results) == 1
        media = results[0]
        assert media.id == 20
        assert media.title.romaji == "Naruto"
        assert media.average_score == 79
        assert media.episode_count == 220
        assert media.genres[0].name == "Action"
        assert requested_urls(rest_client) == [f"{API}/anime?q=Naruto&page=1"]

    async def test_search_falls_back_to_backup(
        self, service: AnimeService, rest_client: AsyncMock
    ) -> None:
        """Test that a 503 from the primary is answered by the backup, read as Kitsu."""
        rest_client.get_json.side_effect = [
            ProviderStatusError("503", status_code=503),
            {"data": [NARUTO_KITSU]},
        ]

        results = await service.search_anime("Naruto", page=2)

        assert requested_urls(rest_client) == [
            f"{API}/anime?q=Naruto&page=2",
            f"{BACKUP}/anime?filter[text]=Naruto&page[2]",
        ]
        assert results[0].id == 11
        assert results[0].average_score == 798
        assert results[0].cover_image_url.endswith("large.jpg")
        assert results[0].genres == []

    async def test_search_encodes_title(
        self, service: AnimeService, rest_client: AsyncMock
    ) -> None:
        rest_client.get_json.return_value = {"data": []}

        await service.search_anime("Fullmetal Alchemist: Brotherhood & co/x")

        assert requested_urls(rest_client) == [
            f"{API}/anime?q=Fullmetal%20Alchemist%3A%20Brotherhood%20%26%20co%2Fx&page=1"
        ]

    async def test_both_tiers_fail_returns_empty(
        self, service: AnimeService, rest_client: AsyncMock
    ) -> None:
        rest_client.get_json.side_effect = [
            ProviderTimeoutError("slow"),
            ProviderNetworkError("refused"),
        ]

        assert await service.search_anime("Naruto") == []
        assert rest_client.get_json.await_count == 2

    async def test_malformed_item_returns_empty(
        self, service: AnimeService, rest_client: AsyncMock
    ) -> None:
        rest_client.get_json.return_value = {"data": [NARUTO_JIKAN, "garbage"]}

        assert await service.get_trending_anime() == []

    async def test_missing_data_returns_empty(
        self, service: AnimeService, rest_client: AsyncMock
    ) -> None:
        rest_client.get_json.return_value = {"pagination": {}}

        assert await service.get_popular_anime() == []

    @pytest.mark.parametrize(
        ("method", "primary_path", "backup_path"),
        [
            ("get_trending_anime", "/top/anime", "/trending/anime"),
            ("get_popular_anime", "/top/anime", "/anime"),
            ("get_top_rated_anime", "/top/anime", "/anime"),
            ("get_recently_updated_anime", "/seasons/now", "/anime"),
            ("get_upcoming_anime", "/seasons/upcoming", "/anime"),
            ("get_most_favorite_anime", "/top/anime", "/anime"),
            ("get_most_watched_anime", "/top/anime", "/trending/anime"),
        ],
    )
    async def test_feed_endpoints(
        self,
        service: AnimeService,
        rest_client: AsyncMock,
        method: str,
        primary_path: str,
        backup_path: str,
    ) -> None:
        """Test every feed's primary and backup endpoint."""
        rest_client.get_json.side_effect = [
            ProviderStatusError("down", status_code=500),
            {"data": [NARUTO_KITSU]},
        ]

        results = await getattr(service, method)()

        assert requested_urls(rest_client) == [f"{API}{primary_path}", f"{BACKUP}{backup_path}"]
        assert [m.id for m in results] == [11]

    async def test_aliases_match_their_targets(
        self, service: AnimeService, rest_client: AsyncMock
    ) -> None:
        rest_client.get_json.return_value = {"data": [NARUTO_JIKAN]}

        assert await service.get_most_favorite_anime() == await service.get_top_rated_anime()
        assert await service.get_most_watched_anime() == await service.get_trending_anime()

    async def test_provider_tags_passed_to_client(
        self, service: AnimeService, rest_client: AsyncMock
    ) -> None:
        rest_client.get_json.side_effect = [ProviderTimeoutError("slow"), {"data": []}]

        await service.get_upcoming_anime()

        providers = [c.args[1] for c in rest_client.get_json.await_args_list]
        assert providers == [ProviderName.JIKAN, ProviderName.KITSU]


class TestAnimeDetails:
    """Test single-item lookup."""

    async def test_dispatch_follows_provenance(
        self, service: AnimeService, mocker: MockerFixture
    ) -> None:
        """Test that the answering provider, not the body shape, picks the normalizer."""
        mocker.patch.object(
            service._orchestrator,
            "fetch",
            return_value=ProviderResponse(
                provider=ProviderName.KITSU, body={"data": {"id": "11", "title": "ignored"}}
            ),
        )

        media = await service.get_anime_details(11)

        assert media.id == 11
        assert media.title.romaji == ""

    async def test_details_from_primary(
        self, service: AnimeService, rest_client: AsyncMock
    ) -> None:
        rest_client.get_json.return_value = {"data": NARUTO_JIKAN}

        media = await service.get_anime_details(20)

        assert media.id == 20
        assert media.start_date == "2002-10-03T00:00:00+00:00"
        assert requested_urls(rest_client) == [f"{API}/anime/20"]

    async def test_details_from_backup(
        self, service: AnimeService, rest_client: AsyncMock
    ) -> None:
        rest_client.get_json.side_effect = [
            ProviderStatusError("404", status_code=404),
            {"data": NARUTO_KITSU},
        ]

        media = await service.get_anime_details(11)

        assert media.id == 11
        assert requested_urls(rest_client)[1] == f"{BACKUP}/anime/11"

    async def test_details_failure_returns_blank(
        self, service: AnimeService, rest_client: AsyncMock
    ) -> None:
        rest_client.get_json.side_effect = ProviderNetworkError("offline")

        media = await service.get_anime_details(20)

        assert media == CanonicalMedia()
        assert media.is_blank

    async def test_details_without_data_returns_blank(
        self, service: AnimeService, rest_client: AsyncMock
    ) -> None:
        rest_client.get_json.return_value = {"data": None}

        assert (await service.get_anime_details(20)).is_blank


class TestUnauthenticated:
    """Test that missing auth short-circuits without network calls."""

    async def test_empty_values(
        self, anonymous_service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        assert (await anonymous_service.get_user_anime_list()).is_empty
        assert await anonymous_service.get_favorites() == []
        assert await anonymous_service.toggle_favorite(20) == []
        assert await anonymous_service.save_media_progress(20, 3) is None
        assert await anonymous_service.is_anime_favorite(20) is False
        assert await anonymous_service.update_anime_status(20, "CURRENT") is None
        assert await anonymous_service.delete_anime_entry(5) is None
        assert await anonymous_service.get_anime_status(20) is None

        graphql_client.execute.assert_not_awaited()

    async def test_invalid_auth_context_counts_as_missing(
        self, settings: ProviderSettings, graphql_client: AsyncMock
    ) -> None:
        service = AnimeService(
            settings,
            auth_provider=lambda: AuthContext(user_id=42, access_token=""),
            rest_client=AsyncMock(spec=IRestClient),
            graphql_client=graphql_client,
        )

        assert await service.get_favorites() == []
        graphql_client.execute.assert_not_awaited()


class TestUpdateAnimeStatus:
    """Test status validation and the status mutation."""

    async def test_invalid_status_raises_before_network(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        with pytest.raises(InvalidMediaListStatusError) as exc_info:
            await service.update_anime_status(20, "watching")

        assert exc_info.value.status == "watching"
        graphql_client.execute.assert_not_awaited()

    async def test_invalid_status_raises_even_without_auth(
        self, anonymous_service: AnimeService
    ) -> None:
        with pytest.raises(InvalidMediaListStatusError):
            await anonymous_service.update_anime_status(20, "")

    async def test_status_is_uppercased(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.return_value = {
            "SaveMediaListEntry": {"id": 1, "status": "COMPLETED"}
        }

        await service.update_anime_status(20, "completed")

        graphql_client.execute.assert_awaited_once_with(
            anilist_queries.UPDATE_ANIME_STATUS_MUTATION,
            {"mediaId": 20, "status": "COMPLETED"},
            access_token="token-abc",
            operation_name="UpdateAnimeStatus",
        )

    async def test_network_failure_is_swallowed(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.side_effect = ProviderNetworkError("offline")

        assert await service.update_anime_status(20, "PAUSED") is None

    async def test_missing_payload_is_swallowed(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.return_value = {"SaveMediaListEntry": None}

        assert await service.update_anime_status(20, "DROPPED") is None


class TestMutations:
    """Test LOG_AND_SWALLOW mutations."""

    async def test_save_media_progress(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.return_value = {"SaveMediaListEntry": {"id": 9, "progress": 3}}

        await service.save_media_progress(20, 3)

        graphql_client.execute.assert_awaited_once_with(
            anilist_queries.SAVE_MEDIA_PROGRESS_MUTATION,
            {"mediaId": 20, "progress": 3},
            access_token="token-abc",
            operation_name="SaveMediaProgress",
        )

    async def test_save_media_progress_error_swallowed(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.side_effect = GraphQLOperationError("Invalid token")

        assert await service.save_media_progress(20, 3) is None

    async def test_toggle_favorite_returns_favourites(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.return_value = {
            "ToggleFavourite": {"anime": {"nodes": [ANILIST_MEDIA]}}
        }

        favourites = await service.toggle_favorite(20)

        assert [m.id for m in favourites] == [20]
        assert favourites[0].average_score == 79

    async def test_toggle_favorite_failure_returns_empty(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.side_effect = ProviderTimeoutError("slow")

        assert await service.toggle_favorite(20) == []

    async def test_delete_anime_entry(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.return_value = {"DeleteMediaListEntry": {"deleted": True}}

        await service.delete_anime_entry(5)

        assert graphql_client.execute.await_args.args[1] == {"id": 5}

    async def test_delete_not_deleted_swallowed(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.return_value = {"DeleteMediaListEntry": {"deleted": False}}

        assert await service.delete_anime_entry(5) is None


class TestPropagatingQueries:
    """Test PROPAGATE reads."""

    async def test_get_user_anime_list(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.return_value = {
            "MediaListCollection": {
                "lists": [
                    {
                        "name": "Watching",
                        "status": "CURRENT",
                        "entries": [
                            {
                                "id": 1,
                                "mediaId": 20,
                                "status": "CURRENT",
                                "progress": 3,
                                "media": ANILIST_MEDIA,
                            }
                        ],
                    }
                ]
            }
        }

        collection = await service.get_user_anime_list(status="CURRENT")

        assert len(collection.lists) == 1
        entry = collection.lists[0].entries[0]
        assert entry.media_id == 20
        assert entry.progress == 3
        assert entry.media is not None and entry.media.title.romaji == "Naruto"
        assert graphql_client.execute.await_args.args[1] == {
            "userId": 42,
            "status": "CURRENT",
            "type": "ANIME",
        }

    async def test_get_user_anime_list_wraps_errors(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        cause = ProviderNetworkError("offline")
        graphql_client.execute.side_effect = cause

        with pytest.raises(AnimeServiceError) as exc_info:
            await service.get_user_anime_list()

        assert exc_info.value.operation == "GetUserAnimeList"
        assert exc_info.value.cause is cause
        assert exc_info.value.__cause__ is cause

    async def test_get_favorites(self, service: AnimeService, graphql_client: AsyncMock) -> None:
        graphql_client.execute.return_value = {
            "User": {"favourites": {"anime": {"nodes": [ANILIST_MEDIA]}}}
        }

        favourites = await service.get_favorites()

        assert [m.id for m in favourites] == [20]
        assert graphql_client.execute.await_args.args[1] == {"userId": 42}

    async def test_get_favorites_empty_payload(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.return_value = {"User": None}

        assert await service.get_favorites() == []

    async def test_get_favorites_wraps_errors(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.side_effect = GraphQLOperationError("Unauthorized")

        with pytest.raises(AnimeServiceError, match="GetFavorites"):
            await service.get_favorites()

    @pytest.mark.parametrize(("payload", "expected"), [(True, True), (False, False), (None, False)])
    async def test_is_anime_favorite(
        self,
        service: AnimeService,
        graphql_client: AsyncMock,
        payload: bool | None,
        expected: bool,
    ) -> None:
        graphql_client.execute.return_value = {"Media": {"isFavourite": payload}}

        assert await service.is_anime_favorite(20) is expected

    async def test_is_anime_favorite_wraps_errors(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.side_effect = ProviderStatusError("500", status_code=500)

        with pytest.raises(AnimeServiceError):
            await service.is_anime_favorite(20)

    async def test_get_anime_status(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.return_value = {"MediaList": {"id": 77, "status": "PAUSED"}}

        info = await service.get_anime_status(20)

        assert info == MediaListStatusInfo(entry_id=77, status="PAUSED")
        assert graphql_client.execute.await_args.args[1] == {"userId": 42, "animeId": 20}

    async def test_get_anime_status_not_listed(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.return_value = {"MediaList": None}

        assert await service.get_anime_status(20) is None

    async def test_get_anime_status_wraps_errors(
        self, service: AnimeService, graphql_client: AsyncMock
    ) -> None:
        graphql_client.execute.side_effect = GraphQLOperationError("Not Found.")

        with pytest.raises(AnimeServiceError):
            await service.get_anime_status(20)


class TestOperationTable:
    """Test the per-operation error policy table."""

    def test_policies(self) -> None:
        policies = {name: op.policy for name, op in GRAPHQL_OPERATIONS.items()}
        assert policies == {
            "GetUserAnimeList": ErrorPolicy.PROPAGATE,
            "GetFavorites": ErrorPolicy.PROPAGATE,
            "IsAnimeFavorite": ErrorPolicy.PROPAGATE,
            "GetAnimeStatus": ErrorPolicy.PROPAGATE,
            "ToggleFavorite": ErrorPolicy.LOG_AND_SWALLOW,
            "SaveMediaProgress": ErrorPolicy.LOG_AND_SWALLOW,
            "UpdateAnimeStatus": ErrorPolicy.LOG_AND_SWALLOW,
            "DeleteAnimeEntry": ErrorPolicy.LOG_AND_SWALLOW,
        }

    def test_documents_name_their_operation(self) -> None:
        for name, op in GRAPHQL_OPERATIONS.items():
            assert f" {name}" in op.document
            assert op.is_mutation == op.document.lstrip().startswith("mutation")


class TestLifecycle:
    async def test_close_closes_both_clients(
        self, service: AnimeService, rest_client: AsyncMock, graphql_client: AsyncMock
    ) -> None:
        async with service:
            pass

        rest_client.close.assert_awaited_once()
        graphql_client.close.assert_awaited_once()

    def test_name(self, service: AnimeService) -> None:
        assert service.name == "Anilist"
