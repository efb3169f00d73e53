"""Provider JSON -> CanonicalMedia mapping.

Pure functions, no I/O. Every missing or null
field maps to its documented default; only an item that isn't a JSON object at all
raises NormalizationError.

Score rule: scale x10 and TRUNCATE (never round), done in Decimal so 8.2 gives 82
and not 81 from float noise. Examples: 8.5 -> 85, 7.95 -> 79, "72.3" -> 723.
"""

from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

from shonenx.domain.dtos import CanonicalMedia, Genre, MediaTitle, ProviderName
from shonenx.domain.exceptions import NormalizationError

Normalizer = Callable[[Mapping[str, Any]], CanonicalMedia]


def _as_mapping(value: Any) -> Mapping[str, Any]:
    """Return value if it's a mapping, else an empty one (for optional nested objects)."""
    return value if isinstance(value, Mapping) else {}


def _require_mapping(item: Any, provider: ProviderName) -> Mapping[str, Any]:
    if not isinstance(item, Mapping):
        raise NormalizationError(
            f"{provider.value} item must be a JSON object, got {type(item).__name__}"
        )
    return item


def _to_int(value: Any, default: int | None = 0) -> int | None:
    """Parse ints that may arrive as numbers or numeric strings."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else default
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def _first_present(*values: Any) -> Any:
    """First value that is not None."""
    return next((value for value in values if value is not None), None)


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _first_text(*candidates: Any) -> str:
    """First non-empty string among candidates."""
    for candidate in candidates:
        if isinstance(candidate, str) and candidate:
            return candidate
    return ""


def _scale_score(value: Any) -> int | None:
    """0-10 score (number or numeric string) -> 0-100 int, truncated."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        scaled = Decimal(str(value).strip()) * 10
    except ArithmeticError:
        # InvalidOperation for junk, Overflow for exponents past the context limit
        return None
    if not scaled.is_finite():
        return None
    return int(scaled)


def _episode_count(value: Any) -> int | None:
    return _to_int(value, default=None)


# Hey future me - Jikan's "titles" is a list of {"type": "Default", "title": "..."} objects
# in v4, but older payloads had plain strings. Accept both.
def _jikan_title(item: Mapping[str, Any]) -> str:
    title = item.get("title")
    if isinstance(title, str) and title:
        return title
    titles = item.get("titles")
    if isinstance(titles, list):
        for entry in titles:
            if isinstance(entry, str) and entry:
                return entry
            if isinstance(entry, Mapping) and _text(entry.get("title")):
                return _text(entry.get("title"))
    return ""


def _genres_from_objects(values: Any) -> list[Genre]:
    if not isinstance(values, list):
        return []
    genres: list[Genre] = []
    for value in values:
        if isinstance(value, Mapping):
            name = value.get("name")
        else:
            name = value
        if isinstance(name, str) and name:
            genres.append(Genre(name=name))
    return genres


def normalize_jikan_media(item: Mapping[str, Any]) -> CanonicalMedia:
    """Map a Jikan (MyAnimeList) anime object to CanonicalMedia."""
    item = _require_mapping(item, ProviderName.JIKAN)

    jpg = _as_mapping(_as_mapping(item.get("images")).get("jpg"))
    aired = _as_mapping(item.get("aired"))

    return CanonicalMedia(
        id=_to_int(_first_present(item.get("mal_id"), item.get("id"))) or 0,
        title=MediaTitle(
            romaji=_jikan_title(item),
            english=_text(item.get("title_english")),
            native=_text(item.get("title_japanese")),
        ),
        cover_image_url=_first_text(jpg.get("image_url"), item.get("image_url")),
        description=_first_text(item.get("synopsis"), item.get("summary")),
        average_score=_scale_score(item.get("score"))
        if isinstance(item.get("score"), (int, float))
        else None,
        episode_count=_episode_count(item.get("episodes")),
        start_date=aired.get("from") if isinstance(aired.get("from"), str) else None,
        genres=_genres_from_objects(item.get("genres")),
    )


def normalize_kitsu_media(item: Mapping[str, Any]) -> CanonicalMedia:
    """Map a Kitsu JSON:API resource ({id, attributes}) to CanonicalMedia.

    Genres stay empty: Kitsu needs a second relationship call we don't make.
    """
    item = _require_mapping(item, ProviderName.KITSU)

    attributes = _as_mapping(item.get("attributes"))
    titles = _as_mapping(attributes.get("titles"))
    poster = _as_mapping(attributes.get("posterImage"))
    raw_id = _first_present(item.get("id"), item.get("mal_id"))

    return CanonicalMedia(
        id=_to_int(raw_id) or 0,
        title=MediaTitle(
            romaji=_first_text(attributes.get("canonicalTitle"), titles.get("en_jp")),
            english=_text(titles.get("en")),
            native=_text(titles.get("ja_jp")),
        ),
        cover_image_url=_first_text(
            poster.get("large"), poster.get("medium"), poster.get("small")
        ),
        description=_text(attributes.get("synopsis")),
        average_score=_scale_score(attributes.get("averageRating")),
        episode_count=_episode_count(attributes.get("episodeCount")),
        start_date=attributes.get("startDate")
        if isinstance(attributes.get("startDate"), str)
        else None,
        genres=[],
    )


def _anilist_date(value: Any) -> str | None:
    """{year, month, day} -> "YYYY[-MM[-DD]]", None without a year."""
    date = _as_mapping(value)
    year = _to_int(date.get("year"), default=None)
    if year is None:
        return None
    parts = [f"{year:04d}"]
    month = _to_int(date.get("month"), default=None)
    if month is not None:
        parts.append(f"{month:02d}")
        day = _to_int(date.get("day"), default=None)
        if day is not None:
            parts.append(f"{day:02d}")
    return "-".join(parts)


def normalize_anilist_media(item: Mapping[str, Any]) -> CanonicalMedia:
    """Map an AniList GraphQL Media node to CanonicalMedia.

    averageScore is already 0-100 on AniList, so it passes through unscaled.
    """
    item = _require_mapping(item, ProviderName.ANILIST)

    title = _as_mapping(item.get("title"))
    cover = _as_mapping(item.get("coverImage"))

    return CanonicalMedia(
        id=_to_int(item.get("id")) or 0,
        title=MediaTitle(
            romaji=_text(title.get("romaji")),
            english=_text(title.get("english")),
            native=_text(title.get("native")),
        ),
        cover_image_url=_first_text(
            cover.get("extraLarge"), cover.get("large"), cover.get("medium")
        ),
        description=_text(item.get("description")),
        average_score=_to_int(item.get("averageScore"), default=None),
        episode_count=_episode_count(item.get("episodes")),
        start_date=_anilist_date(item.get("startDate")),
        genres=_genres_from_objects(item.get("genres")),
    )


NORMALIZERS: dict[ProviderName, Normalizer] = {
    ProviderName.JIKAN: normalize_jikan_media,
    ProviderName.KITSU: normalize_kitsu_media,
    ProviderName.ANILIST: normalize_anilist_media,
}


def normalize(item: Any, provider: ProviderName) -> CanonicalMedia:
    """Normalize one item with the normalizer of the provider that produced it."""
    return NORMALIZERS[provider](item)


def extract_items(body: Any) -> list[Any]:
    """Unwrap the list under the shared `data` envelope.

    A single object under `data` is treated as a one-item list.

    Raises:
        NormalizationError: Body isn't a JSON object, or `data` is neither list nor object
    """
    if not isinstance(body, Mapping):
        raise NormalizationError(
            f"Response envelope must be a JSON object, got {type(body).__name__}"
        )
    data = body.get("data")
    if data is None:
        return []
    if isinstance(data, list):
        return data
    if isinstance(data, Mapping):
        return [data]
    raise NormalizationError(f"Unexpected `data` type: {type(data).__name__}")


def extract_item(body: Any) -> Any | None:
    """Unwrap the single object under `data` (detail endpoints)."""
    items = extract_items(body)
    return items[0] if items else None
