"""Mattermost API client."""

from mcp_mattermost.infrastructure.mattermost.client import (
    DEFAULT_LIMIT_AFTER,
    MattermostClient,
)

__all__ = ["DEFAULT_LIMIT_AFTER", "MattermostClient"]
