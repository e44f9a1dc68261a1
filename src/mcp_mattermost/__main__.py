"""Application entry point for mcp-mattermost."""

import argparse
import asyncio
import signal
import sys
from pathlib import Path

from pydantic import ValidationError

from mcp_mattermost import __version__
from mcp_mattermost.application.services.mattermost_service import MattermostService
from mcp_mattermost.config import (
    AppConfig,
    ConfigError,
    ConfigFileNotFoundError,
    load_config,
    load_config_from_env,
)
from mcp_mattermost.domain.errors import MattermostMcpError
from mcp_mattermost.infrastructure import MattermostClient
from mcp_mattermost.infrastructure.logging import get_logger, setup_logging
from mcp_mattermost.presentation.http.auth import (
    create_auth_middleware,
    parse_auth_tokens,
)
from mcp_mattermost.presentation.http.server import HTTPServer
from mcp_mattermost.presentation.mcp import McpProtocolHandler, ToolRegistry

# Shutdown timeout in seconds
SHUTDOWN_TIMEOUT = 30


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        args: Command line arguments. If None, uses sys.argv.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        description="mcp-mattermost - MCP server for the Mattermost API"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help=(
            "Path to a YAML configuration file "
            "(default: read MCP_* environment variables)"
        ),
    )
    return parser.parse_args(args)


def build_config(config_path: Path | None) -> AppConfig:
    """Load configuration from a YAML file, or the environment if no path."""
    if config_path is None:
        return load_config_from_env(env_file=Path(".env"))
    return load_config(config_path)


async def main_async(
    config: AppConfig,
    shutdown_timeout: float = SHUTDOWN_TIMEOUT,
) -> int:
    """Async main function.

    Args:
        config: Application configuration.
        shutdown_timeout: Maximum time in seconds to wait for graceful shutdown.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    # 1. Initialize logging
    setup_logging(config.logging)
    logger = get_logger(__name__)
    logger.info("Starting mcp-mattermost", version=__version__, url=config.mattermost.url)

    # 2. Initialize components
    client = MattermostClient(config.mattermost.url, config.mattermost.token)
    service = MattermostService(
        api=client,
        config=config.mattermost,
        logger=get_logger("mattermost"),
    )

    try:
        # 3. Resolve teams; the server is useless without them
        try:
            await service.initialize()
        except (MattermostMcpError, ValidationError) as e:
            logger.error("Failed to initialize", error=str(e))
            return 1

        registry = ToolRegistry.default(service, logger=get_logger("tools"))
        token_map = parse_auth_tokens(config.auth.tokens, logger)
        if token_map is None:
            logger.warning("Authentication disabled")
        else:
            logger.info("Authentication enabled", user_count=len(set(token_map.values())))
        http_server = HTTPServer(
            config=config.server,
            protocol_handler=McpProtocolHandler(
                registry, version=__version__, logger=get_logger("mcp")
            ),
            logger=get_logger("http_server"),
            middlewares=(create_auth_middleware(token_map, get_logger("auth")),),
        )

        # 4. Setup shutdown handling
        shutdown_event = asyncio.Event()

        def signal_handler(sig: signal.Signals) -> None:
            logger.info("Received signal, initiating shutdown", signal=sig.name)
            shutdown_event.set()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler, sig)

        try:
            # 5. Start HTTP server and wait for a signal
            await http_server.start()
            logger.info("mcp-mattermost started successfully", teams=list(service.team_ids))
            await shutdown_event.wait()

        except asyncio.CancelledError:
            logger.info("Main loop cancelled")

        finally:
            # 6. Shutdown
            logger.info("Shutting down")
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
            try:
                await asyncio.wait_for(http_server.stop(), timeout=shutdown_timeout)
                logger.info("mcp-mattermost stopped")
            except TimeoutError:
                logger.warning(
                    "Shutdown timed out, forcing termination",
                    timeout_seconds=shutdown_timeout,
                )
    finally:
        await client.close()

    return 0


def main() -> None:
    """Main entry point."""
    args = parse_args()
    config_path = args.config

    try:
        config = build_config(config_path)
        exit_code = asyncio.run(main_async(config))
        sys.exit(exit_code)
    except ConfigFileNotFoundError:
        print(f"Error: {config_path} not found", file=sys.stderr)
        sys.exit(1)
    except ConfigError as e:
        print(f"Error: Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    except ValidationError as e:
        print(f"Error: Configuration validation error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()
