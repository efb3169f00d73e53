"""GraphQL documents for authenticated AniList operations."""

# Shared selection for Media nodes - normalize_anilist_media reads exactly these fields.
MEDIA_FIELDS = """
    id
    title { romaji english native }
    coverImage { large medium }
    description
    averageScore
    episodes
    startDate { year month day }
    genres
"""

USER_ANIME_LIST_QUERY = (
    """
query GetUserAnimeList($userId: Int!, $status: MediaListStatus, $type: MediaType) {
  MediaListCollection(userId: $userId, status: $status, type: $type) {
    lists {
      name
      status
      entries {
        id
        mediaId
        status
        progress
        score
        media {"""
    + MEDIA_FIELDS
    + """        }
      }
    }
  }
}
"""
)

USER_FAVORITES_QUERY = (
    """
query GetFavorites($userId: Int!) {
  User(id: $userId) {
    favourites {
      anime {
        nodes {"""
    + MEDIA_FIELDS
    + """        }
      }
    }
  }
}
"""
)

TOGGLE_FAVORITE_MUTATION = (
    """
mutation ToggleFavorite($animeId: Int!) {
  ToggleFavourite(animeId: $animeId) {
    anime {
      nodes {"""
    + MEDIA_FIELDS
    + """      }
    }
  }
}
"""
)

SAVE_MEDIA_PROGRESS_MUTATION = """
mutation SaveMediaProgress($mediaId: Int!, $progress: Int!) {
  SaveMediaListEntry(mediaId: $mediaId, progress: $progress) {
    id
    mediaId
    progress
  }
}
"""

IS_ANIME_FAVORITE_QUERY = """
query IsAnimeFavorite($animeId: Int!) {
  Media(id: $animeId, type: ANIME) {
    id
    isFavourite
  }
}
"""

UPDATE_ANIME_STATUS_MUTATION = """
mutation UpdateAnimeStatus($mediaId: Int!, $status: MediaListStatus!) {
  SaveMediaListEntry(mediaId: $mediaId, status: $status, progress: 0) {
    id
    mediaId
    status
    progress
    score
  }
}
"""

DELETE_ANIME_ENTRY_MUTATION = """
mutation DeleteAnimeEntry($id: Int!) {
  DeleteMediaListEntry(id: $id) {
    deleted
  }
}
"""

GET_ANIME_STATUS_QUERY = """
query GetAnimeStatus($userId: Int!, $animeId: Int!) {
  MediaList(userId: $userId, mediaId: $animeId) {
    id
    status
  }
}
"""
