"""Channel entity."""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from mcp_mattermost.domain.entities.timestamps import EpochMillis, EpochMillisOrUnset


class ChannelType(str, Enum):
    """Channel type enumeration."""

    OPEN = "O"
    PRIVATE = "P"
    DIRECT = "D"
    GROUP = "G"


class Channel(BaseModel):
    """Mattermost channel with normalized timestamps.

    ``type`` is kept as the raw string so unknown server-side types still
    validate.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    team_id: str = ""
    name: str = ""
    display_name: str = ""
    type: str = ""
    create_at: EpochMillis = None
    update_at: EpochMillis = None
    delete_at: EpochMillisOrUnset = None
