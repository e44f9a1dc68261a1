"""MCP server for the Mattermost API."""

__version__ = "0.1.0"
