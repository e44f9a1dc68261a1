"""JSON-RPC 2.0 dispatcher for the MCP methods this server supports."""

from enum import IntEnum
from typing import Any

from pydantic import ValidationError
from structlog.stdlib import BoundLogger

from mcp_mattermost.presentation.mcp.tools import ToolRegistry, UnknownToolError

JSONRPC_VERSION = "2.0"
SERVER_NAME = "mcp-mattermost"

# Newest first; the first entry is offered when the client's version is unknown
SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")


class ErrorCode(IntEnum):
    """JSON-RPC error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    # Server-defined
    METHOD_NOT_ALLOWED = -32000
    UNAUTHORIZED = -32001


def error_response(
    request_id: Any, code: ErrorCode, message: str
) -> dict[str, Any]:
    """Build a JSON-RPC error response."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "error": {"code": int(code), "message": message},
        "id": request_id,
    }


def result_response(request_id: Any, result: dict[str, Any]) -> dict[str, Any]:
    """Build a JSON-RPC success response."""
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


class McpProtocolHandler:
    """Handle MCP JSON-RPC messages.

    Supported methods: ``initialize``, ``ping``, ``tools/list``,
    ``tools/call`` and any ``notifications/*`` (acknowledged silently).

    Args:
        registry: Tool registry used for tools/list and tools/call.
        version: Server version reported in serverInfo.
        logger: Structured logger.
    """

    def __init__(self, registry: ToolRegistry, version: str, logger: BoundLogger) -> None:
        self._registry = registry
        self._version = version
        self._logger = logger

    async def handle(self, message: Any) -> dict[str, Any] | None:
        """Handle a single decoded JSON-RPC message.

        Args:
            message: Decoded request body.

        Returns:
            Response object, or None for notifications.
        """
        if (
            not isinstance(message, dict)
            or message.get("jsonrpc") != JSONRPC_VERSION
            or not isinstance(message.get("method"), str)
        ):
            request_id = message.get("id") if isinstance(message, dict) else None
            return error_response(
                request_id, ErrorCode.INVALID_REQUEST, "Invalid Request"
            )

        method: str = message["method"]
        if "id" not in message:
            self._logger.debug("Notification received", method=method)
            return None

        request_id = message["id"]
        params = message.get("params") or {}
        if not isinstance(params, dict):
            return error_response(
                request_id, ErrorCode.INVALID_PARAMS, "params must be an object"
            )

        try:
            if method == "initialize":
                return result_response(request_id, self._initialize(params))
            elif method == "ping":
                return result_response(request_id, {})
            elif method == "tools/list":
                return result_response(
                    request_id, {"tools": self._registry.list_tools()}
                )
            elif method == "tools/call":
                return await self._call_tool(request_id, params)
            else:
                return error_response(
                    request_id,
                    ErrorCode.METHOD_NOT_FOUND,
                    f"Method not found: {method}",
                )
        except Exception as e:
            self._logger.error(
                "Error handling request", method=method, error=str(e), exc_info=True
            )
            return error_response(request_id, ErrorCode.INTERNAL_ERROR, str(e))

    def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        requested = params.get("protocolVersion")
        if requested in SUPPORTED_PROTOCOL_VERSIONS:
            protocol_version = requested
        else:
            protocol_version = SUPPORTED_PROTOCOL_VERSIONS[0]
        self._logger.info(
            "Client initialized",
            client=params.get("clientInfo"),
            protocol_version=protocol_version,
        )
        return {
            "protocolVersion": protocol_version,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": SERVER_NAME, "version": self._version},
        }

    async def _call_tool(
        self, request_id: Any, params: dict[str, Any]
    ) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            return error_response(
                request_id, ErrorCode.INVALID_PARAMS, "Tool name is required"
            )
        try:
            result = await self._registry.call(name, params.get("arguments"))
        except UnknownToolError as e:
            return error_response(request_id, ErrorCode.INVALID_PARAMS, str(e))
        except ValidationError as e:
            return error_response(
                request_id,
                ErrorCode.INVALID_PARAMS,
                f"Invalid arguments for tool {name}: {e}",
            )
        return result_response(request_id, result)
