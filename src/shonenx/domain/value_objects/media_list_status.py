"""AniList MediaListStatus value object."""

import logging
from enum import Enum

from shonenx.domain.exceptions import InvalidMediaListStatusError

logger = logging.getLogger(__name__)


class MediaListStatus(str, Enum):
    """Tracking status of an entry on a user's AniList list."""

    CURRENT = "CURRENT"
    COMPLETED = "COMPLETED"
    PAUSED = "PAUSED"
    DROPPED = "DROPPED"
    PLANNING = "PLANNING"
    REPEATING = "REPEATING"


VALID_MEDIA_LIST_STATUSES: tuple[str, ...] = tuple(s.value for s in MediaListStatus)


# Hey future me - "watching" is NOT a valid status even though the UI label says so.
# AniList calls it CURRENT. We only upper-case, we don't translate synonyms. Raising here
# is deliberate: a bad status is a programmer error and must blow up before any network call.
def validate_media_list_status(status: str) -> MediaListStatus:
    """Validate a status string case-insensitively.

    Args:
        status: Status as typed by the caller ("completed", "PAUSED", ...)

    Returns:
        The matching MediaListStatus

    Raises:
        InvalidMediaListStatusError: If the value is not a known status
    """
    upper_status = (status or "").strip().upper()
    try:
        return MediaListStatus(upper_status)
    except ValueError:
        logger.warning(
            "Invalid MediaListStatus: %s. Valid values: %s",
            status,
            VALID_MEDIA_LIST_STATUSES,
        )
        raise InvalidMediaListStatusError(status, VALID_MEDIA_LIST_STATUSES) from None
