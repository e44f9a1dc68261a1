"""Reaction entity."""

from pydantic import BaseModel, ConfigDict

from mcp_mattermost.domain.entities.timestamps import EpochMillis


class Reaction(BaseModel):
    """Emoji reaction on a post."""

    model_config = ConfigDict(extra="allow")

    user_id: str = ""
    post_id: str = ""
    emoji_name: str = ""
    create_at: EpochMillis = None
