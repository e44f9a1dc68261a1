"""aiohttp implementation of the MattermostApi protocol (API v4)."""

from typing import Any
from urllib.parse import quote

import aiohttp

from mcp_mattermost.domain.errors import MattermostApiError
from mcp_mattermost.domain.repositories.mattermost_api import JSON

API_PREFIX = "/api/v4"

# Matches the web client's default page size for unread posts
DEFAULT_LIMIT_AFTER = 30


def _segment(value: str) -> str:
    return quote(value, safe="")


def _query(params: dict[str, Any]) -> dict[str, str]:
    """Drop None values and render booleans the way the server expects."""
    rendered: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        rendered[key] = str(value).lower() if isinstance(value, bool) else str(value)
    return rendered


class MattermostClient:
    """HTTP client for the Mattermost REST API.

    The underlying session is created on first use and must be released
    with ``close()``.

    Args:
        url: Server base URL, without the ``/api/v4`` suffix.
        token: Personal access token or bot token.
        timeout: Total timeout in seconds for a single request.
    """

    def __init__(self, url: str, token: str, timeout: float = 30.0) -> None:
        self._base_url = url.rstrip("/") + API_PREFIX
        self._token = token
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    @property
    def base_url(self) -> str:
        """Return the API base URL."""
        return self._base_url

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "Authorization": f"Bearer {self._token}",
                    "X-Requested-With": "XMLHttpRequest",
                },
                timeout=self._timeout,
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        """Send a request and decode the JSON response.

        Raises:
            MattermostApiError: On a non-2xx response or a transport failure.
        """
        url = self._base_url + path
        session = self._get_session()
        try:
            async with session.request(
                method, url, params=_query(params or {}), json=body
            ) as response:
                if response.status >= 400:
                    raise await self._error_from_response(response, url)
                if response.status == 204:
                    return None
                return await response.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            raise MattermostApiError(
                f"Request to {url} failed: {e}", url=url
            ) from e

    @staticmethod
    async def _error_from_response(
        response: aiohttp.ClientResponse, url: str
    ) -> MattermostApiError:
        message = f"Received invalid response from the server (HTTP {response.status})"
        server_error_id = None
        try:
            data = await response.json(content_type=None)
        except ValueError:
            data = None
        if isinstance(data, dict):
            message = data.get("message") or message
            server_error_id = data.get("id")
        return MattermostApiError(
            message,
            status_code=response.status,
            server_error_id=server_error_id,
            url=url,
        )

    # Teams

    async def get_team(self, team_id: str) -> JSON | None:
        return await self._request("GET", f"/teams/{_segment(team_id)}")

    async def get_team_by_name(self, name: str) -> JSON | None:
        return await self._request("GET", f"/teams/name/{_segment(name)}")

    async def get_my_teams(self) -> list[JSON]:
        return await self._request("GET", "/users/me/teams") or []

    # Users

    async def get_me(self) -> JSON:
        return await self._request("GET", "/users/me")

    async def get_user(self, user_id: str) -> JSON:
        return await self._request("GET", f"/users/{_segment(user_id)}")

    async def get_user_by_username(self, username: str) -> JSON:
        return await self._request("GET", f"/users/username/{_segment(username)}")

    async def search_users(self, term: str, options: JSON) -> list[JSON]:
        data = await self._request(
            "POST", "/users/search", body={"term": term, **options}
        )
        return data or []

    # Channels

    async def search_all_channels(self, term: str, options: JSON) -> list[JSON]:
        """Search channels; unwraps the paged ``{channels, total_count}`` form."""
        data = await self._request(
            "POST", "/channels/search", body={"term": term, **options}
        )
        if isinstance(data, dict):
            return data.get("channels") or []
        return data or []

    async def get_channel(self, channel_id: str) -> JSON:
        return await self._request("GET", f"/channels/{_segment(channel_id)}")

    async def get_channel_by_name(self, team_id: str, name: str) -> JSON:
        return await self._request(
            "GET", f"/teams/{_segment(team_id)}/channels/name/{_segment(name)}"
        )

    async def get_my_channels(self, team_id: str) -> list[JSON]:
        return (
            await self._request("GET", f"/users/me/teams/{_segment(team_id)}/channels")
            or []
        )

    # Posts

    async def search_posts_with_params(self, team_id: str, params: JSON) -> JSON:
        body = {"is_or_search": False, **params}
        return await self._request(
            "POST", f"/teams/{_segment(team_id)}/posts/search", body=body
        )

    async def get_post(self, post_id: str) -> JSON:
        return await self._request("GET", f"/posts/{_segment(post_id)}")

    async def get_posts(self, channel_id: str, page: int, per_page: int) -> JSON:
        return await self._request(
            "GET",
            f"/channels/{_segment(channel_id)}/posts",
            params={"page": page, "per_page": per_page},
        )

    async def get_posts_unread(
        self,
        channel_id: str,
        user_id: str,
        limit_after: int = DEFAULT_LIMIT_AFTER,
        limit_before: int = 0,
        skip_fetch_threads: bool = False,
    ) -> JSON:
        return await self._request(
            "GET",
            f"/users/{_segment(user_id)}/channels/{_segment(channel_id)}/posts/unread",
            params={
                "limit_after": limit_after,
                "limit_before": limit_before,
                "skipFetchThreads": skip_fetch_threads,
            },
        )

    async def create_post(self, post: JSON) -> JSON:
        body = {key: value for key, value in post.items() if value is not None}
        return await self._request("POST", "/posts", body=body)

    async def get_paginated_post_thread(self, root_id: str, options: JSON) -> JSON:
        return await self._request(
            "GET", f"/posts/{_segment(root_id)}/thread", params=options
        )

    async def pin_post(self, post_id: str) -> JSON:
        return await self._request("POST", f"/posts/{_segment(post_id)}/pin")

    async def unpin_post(self, post_id: str) -> JSON:
        return await self._request("POST", f"/posts/{_segment(post_id)}/unpin")

    async def get_pinned_posts(self, channel_id: str) -> JSON:
        return await self._request("GET", f"/channels/{_segment(channel_id)}/pinned")

    # Reactions

    async def add_reaction(self, user_id: str, post_id: str, emoji_name: str) -> JSON:
        return await self._request(
            "POST",
            "/reactions",
            body={"user_id": user_id, "post_id": post_id, "emoji_name": emoji_name},
        )

    async def remove_reaction(
        self, user_id: str, post_id: str, emoji_name: str
    ) -> JSON:
        return await self._request(
            "DELETE",
            f"/users/{_segment(user_id)}/posts/{_segment(post_id)}"
            f"/reactions/{_segment(emoji_name)}",
        )

    async def get_reactions_for_post(self, post_id: str) -> list[JSON]:
        return await self._request("GET", f"/posts/{_segment(post_id)}/reactions") or []
