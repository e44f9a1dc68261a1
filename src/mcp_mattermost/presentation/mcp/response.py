"""MCP tool result envelope."""

import json
from collections.abc import Awaitable
from typing import Any

from pydantic_core import to_jsonable_python
from structlog.stdlib import BoundLogger

from mcp_mattermost.domain.errors import MattermostApiError


def format_success(data: Any) -> dict[str, Any]:
    """Wrap a result as a successful CallToolResult.

    Pydantic models and datetimes are rendered to JSON; timestamps become
    ISO-8601 strings and unset timestamps become null.
    """
    text = json.dumps(to_jsonable_python(data), ensure_ascii=False)
    return {"content": [{"type": "text", "text": text}], "isError": False}


def format_error(message: str) -> dict[str, Any]:
    """Wrap an error message as a failed CallToolResult."""
    return {"content": [{"type": "text", "text": message}], "isError": True}


async def handle_tool_call(
    call: Awaitable[Any], logger: BoundLogger, tool_name: str
) -> dict[str, Any]:
    """Await a tool call and convert its outcome into a CallToolResult.

    Errors are reported in the result rather than raised, so the client
    sees them as a tool failure instead of a protocol error.
    """
    try:
        return format_success(await call)
    except Exception as e:
        if isinstance(e, MattermostApiError):
            logger.error(
                "Tool call failed", tool=tool_name, error=str(e), **e.details()
            )
        else:
            logger.error("Tool call failed", tool=tool_name, error=str(e))
        logger.debug("Tool call traceback", tool=tool_name, exc_info=True)
        return format_error(str(e))
