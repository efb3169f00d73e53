"""
Standard Data Transfer Objects for the anime aggregation core.

Hey future me - these DTOs are the LINGUA FRANCA between providers and the UI!
Jikan, Kitsu and AniList all answer in different shapes; every normalizer MUST hand
back a CanonicalMedia so screens never branch on "which backend answered".

Flow: Provider JSON -> ProviderResponse (tagged) -> Normalizer -> CanonicalMedia -> UI
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ProviderName(str, Enum):
    """Which backend produced a payload."""

    JIKAN = "jikan"  # Provider A, primary REST
    KITSU = "kitsu"  # Provider B, backup REST
    ANILIST = "anilist"  # authenticated GraphQL


@dataclass(frozen=True)
class ProviderResponse:
    """Decoded body tagged with the provider that actually answered.

    Hey future me - Jikan and Kitsu BOTH wrap results in a "data" key, so sniffing
    the shape to pick a normalizer is a coin toss. Dispatch on .provider, always.
    """

    provider: ProviderName
    body: Any
    url: str = ""


@dataclass(frozen=True)
class MediaTitle:
    """Title variants. Empty string when a provider doesn't know one."""

    romaji: str = ""
    english: str = ""
    native: str = ""


@dataclass(frozen=True)
class Genre:
    """A genre tag."""

    name: str


# Hey future me - every field has a default so downstream code never checks "is it there?".
# id and the three title strings are ALWAYS populated (0 / ""), the rest may be None/empty.
# average_score is always 0-100 regardless of the source scale.
@dataclass
class CanonicalMedia:
    """Provider-agnostic anime record."""

    id: int = 0
    title: MediaTitle = field(default_factory=MediaTitle)
    cover_image_url: str = ""
    description: str = ""
    average_score: int | None = None
    episode_count: int | None = None
    start_date: str | None = None
    genres: list[Genre] = field(default_factory=list)

    @property
    def is_blank(self) -> bool:
        """True for the placeholder returned when a detail lookup fails."""
        return self == CanonicalMedia()

    def to_dict(self) -> dict[str, Any]:
        """Render the canonical JSON-shaped map."""
        return {
            "id": self.id,
            "title": {
                "romaji": self.title.romaji,
                "english": self.title.english,
                "native": self.title.native,
            },
            "coverImage": {"large": self.cover_image_url},
            "description": self.description,
            "averageScore": self.average_score,
            "episodes": self.episode_count,
            "startDate": self.start_date,
            "genres": [{"name": genre.name} for genre in self.genres],
        }


MediaParser = Callable[[dict[str, Any]], CanonicalMedia]


@dataclass
class MediaListEntry:
    """One row of a user's AniList list. Only ever built from server data."""

    id: int
    media_id: int
    status: str | None = None
    progress: int | None = None
    score: float | None = None
    media: CanonicalMedia | None = None

    @classmethod
    def from_graphql(cls, data: dict[str, Any], media_parser: MediaParser) -> "MediaListEntry":
        media = data.get("media")
        if not isinstance(media, dict):
            media = None
        return cls(
            id=int(data.get("id") or 0),
            media_id=int(data.get("mediaId") or (media or {}).get("id") or 0),
            status=data.get("status"),
            progress=data.get("progress"),
            score=data.get("score"),
            media=media_parser(media) if media is not None else None,
        )


@dataclass
class MediaList:
    """A named list (Watching, Completed, custom lists...)."""

    name: str = ""
    status: str | None = None
    entries: list[MediaListEntry] = field(default_factory=list)

    @classmethod
    def from_graphql(cls, data: dict[str, Any], media_parser: MediaParser) -> "MediaList":
        return cls(
            name=data.get("name") or "",
            status=data.get("status"),
            entries=[
                MediaListEntry.from_graphql(entry, media_parser)
                for entry in data.get("entries") or []
                if isinstance(entry, dict)
            ],
        )


@dataclass
class MediaListCollection:
    """All lists of one user for one media type."""

    lists: list[MediaList] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.lists

    @classmethod
    def from_graphql(
        cls, data: dict[str, Any] | None, media_parser: MediaParser
    ) -> "MediaListCollection":
        """Build from the `data` of a GetUserAnimeList query.

        Accepts either the whole data map or the inner MediaListCollection object.
        """
        if not data:
            return cls()
        payload = data.get("MediaListCollection", data) or {}
        return cls(
            lists=[
                MediaList.from_graphql(item, media_parser)
                for item in payload.get("lists") or []
                if isinstance(item, dict)
            ]
        )


@dataclass
class MediaListStatusInfo:
    """Result of a status lookup for one (user, media) pair."""

    entry_id: int
    status: str | None = None


@dataclass(frozen=True)
class AuthContext:
    """(userId, accessToken) pair owned by the auth subsystem.

    We only READ this - never persist, never refresh.
    """

    user_id: int | None
    access_token: str | None

    @property
    def is_valid(self) -> bool:
        return self.user_id is not None and bool(self.access_token)


AuthContextProvider = Callable[[], AuthContext | None]


__all__ = [
    "AuthContext",
    "AuthContextProvider",
    "CanonicalMedia",
    "Genre",
    "MediaList",
    "MediaListCollection",
    "MediaListEntry",
    "MediaListStatusInfo",
    "MediaParser",
    "MediaTitle",
    "ProviderName",
    "ProviderResponse",
]
