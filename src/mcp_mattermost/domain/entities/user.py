"""User entity."""

from pydantic import BaseModel, ConfigDict

from mcp_mattermost.domain.entities.timestamps import EpochMillis, EpochMillisOrUnset


class User(BaseModel):
    """Mattermost user profile with normalized timestamps.

    Fields not declared here are passed through as returned by the server.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    username: str = ""
    create_at: EpochMillis = None
    update_at: EpochMillis = None
    delete_at: EpochMillisOrUnset = None
