"""Application services."""

from shonenx.application.services.anime_service import (
    GRAPHQL_OPERATIONS,
    AnimeService,
    ErrorPolicy,
    GraphQLOperation,
)

__all__ = ["GRAPHQL_OPERATIONS", "AnimeService", "ErrorPolicy", "GraphQLOperation"]
