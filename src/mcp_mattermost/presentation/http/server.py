"""HTTP server exposing the MCP endpoint."""

import structlog
from aiohttp import web
from aiohttp.typedefs import Middleware

from mcp_mattermost.config.models import ServerConfig
from mcp_mattermost.presentation.mcp.protocol import (
    ErrorCode,
    McpProtocolHandler,
    error_response,
)


class HTTPServer:
    """Stateless Streamable-HTTP server for MCP.

    This server provides endpoints for:
    - POST /mcp: Handle a JSON-RPC message
    - GET /mcp, DELETE /mcp: Rejected, no sessions or server-sent streams
    - GET /health: Liveness check

    Args:
        config: Server configuration containing host and port.
        protocol_handler: Dispatcher for JSON-RPC messages.
        logger: Structured logger for logging.
        middlewares: aiohttp middlewares, e.g. bearer authentication.
    """

    def __init__(
        self,
        config: ServerConfig,
        protocol_handler: McpProtocolHandler,
        logger: structlog.stdlib.BoundLogger,
        middlewares: tuple[Middleware, ...] = (),
    ) -> None:
        self.config = config
        self._protocol_handler = protocol_handler
        self._logger = logger
        self._middlewares = middlewares
        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

    @property
    def is_running(self) -> bool:
        """Return True if the server is running."""
        return self._site is not None

    @property
    def actual_port(self) -> int:
        """Return the actual port the server is listening on.

        This is useful when port 0 is configured to get a random port.

        Raises:
            RuntimeError: If the server is not running.
        """
        if self._site is None:
            raise RuntimeError("Server is not running")
        # aiohttp does not expose the bound socket publicly
        server = getattr(self._site, "_server", None)
        if server is None:
            raise RuntimeError("Server is not running")
        sockets = getattr(server, "sockets", None)
        if sockets:
            return sockets[0].getsockname()[1]
        raise RuntimeError("No sockets available")

    def create_app(self) -> web.Application:
        """Create and return the aiohttp Application.

        This method is exposed for testing purposes.

        Returns:
            Configured aiohttp Application.
        """
        app = web.Application(middlewares=list(self._middlewares))
        app.router.add_get("/health", self._handle_health_check)
        app.router.add_post("/mcp", self._handle_mcp)
        app.router.add_get("/mcp", self._handle_method_not_allowed)
        app.router.add_delete("/mcp", self._handle_method_not_allowed)
        return app

    async def start(self) -> None:
        """Start the HTTP server."""
        self._app = self.create_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self.config.host, self.config.port)
        await self._site.start()
        self._logger.info(
            "HTTP server started",
            host=self.config.host,
            port=self.actual_port,
        )

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            self._app = None
            self._logger.info("HTTP server stopped")

    async def _handle_health_check(self, request: web.Request) -> web.Response:
        """Handle GET /health requests."""
        return web.json_response({"status": "ok"})

    async def _handle_method_not_allowed(self, request: web.Request) -> web.Response:
        """Reject GET/DELETE on /mcp; this server keeps no sessions."""
        return web.json_response(
            error_response(None, ErrorCode.METHOD_NOT_ALLOWED, "Method not allowed."),
            status=405,
        )

    async def _handle_mcp(self, request: web.Request) -> web.Response:
        """Handle POST /mcp requests.

        Args:
            request: The incoming request.

        Returns:
            JSON-RPC response, or 202 Accepted with no body for notifications.
        """
        try:
            message = await request.json()
        except ValueError:
            # JSONDecodeError and UnicodeDecodeError
            return web.json_response(
                error_response(None, ErrorCode.PARSE_ERROR, "Parse error"),
                status=400,
            )

        try:
            response = await self._protocol_handler.handle(message)
        except Exception as e:
            self._logger.error("Error handling MCP request", error=str(e), exc_info=True)
            return web.json_response(
                error_response(None, ErrorCode.INTERNAL_ERROR, "Internal server error"),
                status=500,
            )

        if response is None:
            return web.Response(status=202)
        return web.json_response(response)
