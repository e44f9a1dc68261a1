"""Team entity."""

from pydantic import BaseModel, ConfigDict


class Team(BaseModel):
    """Mattermost team.

    Only the id is used after resolution; the name is kept for log output.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    display_name: str = ""
