"""Logging infrastructure module."""

from mcp_mattermost.infrastructure.logging.setup import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
