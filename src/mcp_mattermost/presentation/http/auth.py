"""Bearer token authentication for the HTTP server."""

import re
from collections.abc import Collection

import structlog
from aiohttp import web
from aiohttp.typedefs import Handler
from structlog.stdlib import BoundLogger

from mcp_mattermost.presentation.mcp.protocol import ErrorCode, error_response

BEARER_PATTERN = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)

# Request key holding the authenticated username
AUTH_USER_KEY = "auth_user"


def parse_auth_tokens(value: str | None, logger: BoundLogger) -> dict[str, str] | None:
    """Parse ``username:token`` pairs into a token to username mapping.

    Format: ``"alice:token1,bob:token2"``. The token is everything after the
    first colon, so tokens may contain colons. Invalid entries are skipped
    with a warning.

    Args:
        value: Raw configuration value.
        logger: Logger for skipped entries.

    Returns:
        Mapping of token to username, or None when authentication is
        disabled (unset, blank, or no valid entries).
    """
    if not value or not value.strip():
        return None

    token_map: dict[str, str] = {}
    for pair in (entry.strip() for entry in value.split(",")):
        if not pair:
            continue
        username, sep, token = pair.partition(":")
        if not sep or not username:
            logger.warning(
                "Invalid auth token entry (expected 'username:token')", entry=pair
            )
            continue
        username, token = username.strip(), token.strip()
        if not username or not token:
            logger.warning("Empty username or token in auth entry", entry=pair)
            continue
        token_map[token] = username

    if not token_map:
        logger.warning("Auth tokens are set but no valid entries found, auth disabled")
        return None
    return token_map


def _unauthorized(message: str) -> web.Response:
    return web.json_response(
        error_response(None, ErrorCode.UNAUTHORIZED, f"Unauthorized: {message}"),
        status=401,
    )


def create_auth_middleware(
    token_map: dict[str, str] | None,
    logger: BoundLogger,
    public_paths: Collection[str] = ("/health",),
):
    """Create middleware that checks ``Authorization: Bearer <token>``.

    When ``token_map`` is None every request passes through. Paths in
    ``public_paths`` are never checked.

    Args:
        token_map: Token to username mapping from parse_auth_tokens.
        logger: Logger for rejected requests.
        public_paths: Paths exempt from authentication.

    Returns:
        aiohttp middleware.
    """

    @web.middleware
    async def auth_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        if token_map is None or request.path in public_paths:
            return await handler(request)

        header = request.headers.get("Authorization")
        if not header:
            logger.info("Rejected request without credentials", path=request.path)
            return _unauthorized("missing Authorization header")

        match = BEARER_PATTERN.match(header)
        if not match:
            logger.info("Rejected malformed Authorization header", path=request.path)
            return _unauthorized(
                'invalid Authorization header format (expected "Bearer <token>")'
            )

        username = token_map.get(match.group(1))
        if username is None:
            logger.info("Rejected invalid token", path=request.path)
            return _unauthorized("invalid token")

        request[AUTH_USER_KEY] = username
        with structlog.contextvars.bound_contextvars(auth_user=username):
            return await handler(request)

    return auth_middleware
