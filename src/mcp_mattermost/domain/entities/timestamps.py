"""Epoch-millisecond timestamp normalization for Mattermost entities."""

from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import BeforeValidator


def from_epoch_ms(value: Any) -> datetime | None:
    """Convert an epoch-millisecond value to an aware UTC datetime.

    Zero is a valid timestamp and converts to the Unix epoch.

    Args:
        value: Milliseconds since the epoch, an existing datetime, or None.

    Returns:
        The converted datetime, the datetime unchanged, or None.
    """
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
    except (OverflowError, OSError, TypeError) as e:
        raise ValueError(f"Invalid epoch-millisecond timestamp: {value!r}") from e


def from_epoch_ms_or_unset(value: Any) -> datetime | None:
    """Convert an epoch-millisecond value where 0 means "not set".

    Used for ``delete_at`` and ``edit_at``, which the server leaves at 0
    until the post or object is actually deleted or edited.

    Args:
        value: Milliseconds since the epoch, an existing datetime, or None.

    Returns:
        None for 0 or None, otherwise the converted datetime.
    """
    if value == 0:
        return None
    return from_epoch_ms(value)


EpochMillis = Annotated[datetime | None, BeforeValidator(from_epoch_ms)]
EpochMillisOrUnset = Annotated[datetime | None, BeforeValidator(from_epoch_ms_or_unset)]
