"""External integration client implementations."""

from shonenx.infrastructure.integrations.anilist_client import AnilistClient
from shonenx.infrastructure.integrations.rest_client import RestClient

__all__ = ["AnilistClient", "RestClient"]
