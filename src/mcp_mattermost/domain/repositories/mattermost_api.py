"""MattermostApi protocol."""

from typing import Any, Protocol

JSON = dict[str, Any]


class MattermostApi(Protocol):
    """Remote API protocol for a Mattermost server.

    Methods return decoded JSON exactly as the server sends it. Every method
    may raise ``MattermostApiError``.
    """

    async def get_team(self, team_id: str) -> JSON | None:
        """Get a team by ID."""
        ...

    async def get_team_by_name(self, name: str) -> JSON | None:
        """Get a team by its URL name."""
        ...

    async def get_my_teams(self) -> list[JSON]:
        """List the teams the authenticated user belongs to."""
        ...

    async def get_me(self) -> JSON:
        """Get the authenticated user."""
        ...

    async def get_user(self, user_id: str) -> JSON:
        """Get a user by ID."""
        ...

    async def get_user_by_username(self, username: str) -> JSON:
        """Get a user by username."""
        ...

    async def search_users(self, term: str, options: JSON) -> list[JSON]:
        """Search users server-wide.

        Args:
            term: Search term.
            options: Additional search body fields (team_id, limit, ...).
        """
        ...

    async def search_all_channels(self, term: str, options: JSON) -> list[JSON]:
        """Search channels across the given teams.

        Args:
            term: Search term.
            options: Search body fields; ``team_ids``, ``page``, ``per_page``.
        """
        ...

    async def get_channel(self, channel_id: str) -> JSON:
        """Get a channel by ID."""
        ...

    async def get_channel_by_name(self, team_id: str, name: str) -> JSON:
        """Get a channel by name within one team."""
        ...

    async def search_posts_with_params(self, team_id: str, params: JSON) -> JSON:
        """Search posts within one team.

        Args:
            team_id: Team to search in.
            params: Search body; ``terms``, ``page``, ``per_page``.

        Returns:
            Raw post list (``order`` and ``posts``).
        """
        ...

    async def get_post(self, post_id: str) -> JSON:
        """Get a post by ID."""
        ...

    async def get_posts(self, channel_id: str, page: int, per_page: int) -> JSON:
        """Get a page of posts in a channel, newest first."""
        ...

    async def get_posts_unread(
        self,
        channel_id: str,
        user_id: str,
        limit_after: int,
        limit_before: int,
        skip_fetch_threads: bool,
    ) -> JSON:
        """Get posts around the user's last-viewed point in a channel."""
        ...

    async def create_post(self, post: JSON) -> JSON:
        """Create a post."""
        ...

    async def get_paginated_post_thread(self, root_id: str, options: JSON) -> JSON:
        """Get a page of a thread.

        Args:
            root_id: Thread root post ID.
            options: Query options; ``direction``, ``fromPost``, ``perPage``.
        """
        ...

    async def add_reaction(self, user_id: str, post_id: str, emoji_name: str) -> JSON:
        """Add a reaction to a post."""
        ...

    async def remove_reaction(
        self, user_id: str, post_id: str, emoji_name: str
    ) -> JSON:
        """Remove a reaction from a post."""
        ...

    async def get_reactions_for_post(self, post_id: str) -> list[JSON]:
        """List reactions on a post."""
        ...

    async def pin_post(self, post_id: str) -> JSON:
        """Pin a post to its channel."""
        ...

    async def unpin_post(self, post_id: str) -> JSON:
        """Unpin a post from its channel."""
        ...

    async def get_pinned_posts(self, channel_id: str) -> JSON:
        """Get pinned posts in a channel."""
        ...

    async def get_my_channels(self, team_id: str) -> list[JSON]:
        """List channels the authenticated user belongs to in one team."""
        ...
