"""MCP tool adapter."""

from mcp_mattermost.presentation.mcp.protocol import ErrorCode, McpProtocolHandler
from mcp_mattermost.presentation.mcp.tools import (
    TOOL_DEFINITIONS,
    ToolDefinition,
    ToolRegistry,
    UnknownToolError,
)

__all__ = [
    "ErrorCode",
    "McpProtocolHandler",
    "TOOL_DEFINITIONS",
    "ToolDefinition",
    "ToolRegistry",
    "UnknownToolError",
]
