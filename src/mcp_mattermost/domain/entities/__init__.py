"""Domain entities."""

from mcp_mattermost.domain.entities.channel import Channel, ChannelType
from mcp_mattermost.domain.entities.post import Post, PostList
from mcp_mattermost.domain.entities.reaction import Reaction
from mcp_mattermost.domain.entities.team import Team
from mcp_mattermost.domain.entities.user import User

__all__ = ["Channel", "ChannelType", "Post", "PostList", "Reaction", "Team", "User"]
