"""Domain value objects."""

from shonenx.domain.value_objects.media_list_status import (
    VALID_MEDIA_LIST_STATUSES,
    MediaListStatus,
    validate_media_list_status,
)

__all__ = [
    "VALID_MEDIA_LIST_STATUSES",
    "MediaListStatus",
    "validate_media_list_status",
]
