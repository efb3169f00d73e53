"""Provider fallback and response normalization.

    FallbackOrchestrator  → Jikan first, Kitsu on failure, result tagged with provenance
    normalizers           → Jikan / Kitsu / AniList JSON → CanonicalMedia
"""

from shonenx.infrastructure.providers.fallback import FallbackOrchestrator
from shonenx.infrastructure.providers.normalizers import (
    NORMALIZERS,
    extract_item,
    extract_items,
    normalize,
    normalize_anilist_media,
    normalize_jikan_media,
    normalize_kitsu_media,
)

__all__ = [
    "NORMALIZERS",
    "FallbackOrchestrator",
    "extract_item",
    "extract_items",
    "normalize",
    "normalize_anilist_media",
    "normalize_jikan_media",
    "normalize_kitsu_media",
]
