"""Infrastructure layer."""

from mcp_mattermost.infrastructure.mattermost import MattermostClient

__all__ = ["MattermostClient"]
