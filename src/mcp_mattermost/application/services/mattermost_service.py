"""Aggregating facade over the Mattermost API."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from structlog.stdlib import BoundLogger

from mcp_mattermost.application.services.aggregation import (
    dedupe_channels,
    filter_listed_channels,
    merge_post_lists,
)
from mcp_mattermost.application.services.team_resolver import TeamResolver
from mcp_mattermost.config.models import MattermostConfig
from mcp_mattermost.domain.entities import Channel, Post, PostList, Reaction, User
from mcp_mattermost.domain.errors import (
    ChannelNotFoundError,
    MattermostApiError,
    NoTeamsConfiguredError,
)
from mcp_mattermost.domain.repositories.mattermost_api import JSON, MattermostApi

T = TypeVar("T")

# Number of posts after the last-viewed point returned by get_posts_unread
UNREAD_LIMIT_AFTER = 30


class MattermostService:
    """Public operation surface for users, channels, posts and reactions.

    Team-scoped operations run against the team set resolved by
    ``initialize()``. That set is fixed for the lifetime of the instance
    and its order decides precedence whenever per-team results are merged.

    Args:
        api: Mattermost API client.
        config: Mattermost configuration.
        logger: Structured logger.
    """

    def __init__(
        self,
        api: MattermostApi,
        config: MattermostConfig,
        logger: BoundLogger,
    ) -> None:
        self._api = api
        self._config = config
        self._logger = logger
        self._team_ids: tuple[str, ...] = ()

    @property
    def team_ids(self) -> tuple[str, ...]:
        """Return the resolved team IDs."""
        return self._team_ids

    async def initialize(self) -> None:
        """Resolve the working team set.

        Must not be called concurrently on the same instance. On failure
        the team set is left empty and team-scoped operations refuse to run.

        Raises:
            TeamNotFoundError: If a configured team does not resolve.
            NoTeamsFoundError: If auto-discovery finds no teams.
            MattermostApiError: On other remote failures.
        """
        self._team_ids = ()
        resolver = TeamResolver(self._api, self._logger)
        self._team_ids = await resolver.resolve(self._config)

    def _require_teams(self) -> tuple[str, ...]:
        if not self._team_ids:
            raise NoTeamsConfiguredError()
        return self._team_ids

    async def _fan_out(
        self, request: Callable[[str], Awaitable[T]]
    ) -> list[T]:
        """Run one request per resolved team concurrently.

        Results are returned in resolved team order. The first failure
        fails the whole call: the remaining requests are cancelled and
        awaited before the original error is re-raised.
        """
        team_ids = self._require_teams()
        tasks = [asyncio.ensure_future(request(team_id)) for team_id in team_ids]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    # Users

    async def get_me(self) -> User:
        """Get the authenticated user."""
        return User.model_validate(await self._api.get_me())

    async def get_user(self, user_id: str) -> User:
        return User.model_validate(await self._api.get_user(user_id))

    async def get_user_by_username(self, username: str) -> User:
        return User.model_validate(await self._api.get_user_by_username(username))

    async def search_users(self, term: str) -> list[User]:
        """Search users server-wide; not limited to the resolved teams."""
        users = await self._api.search_users(term, {})
        return [User.model_validate(user) for user in users]

    # Channels

    async def search_channels(
        self, term: str, page: int = 0, per_page: int = 100
    ) -> list[Channel]:
        """Search channels across every resolved team.

        The search endpoint accepts a list of teams, so this is a single
        request carrying the whole resolved set.
        """
        team_ids = self._require_teams()
        channels = await self._api.search_all_channels(
            term,
            {"team_ids": list(team_ids), "page": page, "per_page": per_page},
        )
        return [Channel.model_validate(ch) for ch in dedupe_channels(channels)]

    async def get_channel(self, channel_id: str) -> Channel:
        return Channel.model_validate(await self._api.get_channel(channel_id))

    async def get_channel_by_name(self, name: str) -> Channel:
        """Find a channel by name in the first resolved team that has it.

        Teams are tried one at a time in resolved order; a failed lookup
        in one team moves on to the next.

        Raises:
            NoTeamsConfiguredError: If no teams are resolved.
            ChannelNotFoundError: If no team has a channel with that name.
        """
        for team_id in self._require_teams():
            try:
                channel = await self._api.get_channel_by_name(team_id, name)
            except MattermostApiError as e:
                self._logger.debug(
                    "Channel not found in team",
                    channel_name=name,
                    team_id=team_id,
                    error=str(e),
                )
                continue
            return Channel.model_validate(channel)
        raise ChannelNotFoundError(name)

    async def get_my_channels(self) -> list[Channel]:
        """List open and private channels the user belongs to in all teams."""
        per_team = await self._fan_out(self._api.get_my_channels)
        merged = dedupe_channels(ch for channels in per_team for ch in channels)
        return [Channel.model_validate(ch) for ch in filter_listed_channels(merged)]

    # Posts

    async def search_posts(
        self, terms: str, page: int = 0, per_page: int = 100
    ) -> PostList:
        """Search posts in every resolved team and merge the results."""
        params = {"terms": terms, "page": page, "per_page": per_page}
        results = await self._fan_out(
            lambda team_id: self._api.search_posts_with_params(team_id, params)
        )
        return PostList.from_api(merge_post_lists(results))

    async def get_post(self, post_id: str) -> Post:
        return Post.model_validate(await self._api.get_post(post_id))

    async def get_posts_for_channel(
        self, channel_id: str, page: int = 0, per_page: int = 30
    ) -> PostList:
        """Get recent posts in a channel, newest first."""
        return PostList.from_api(await self._api.get_posts(channel_id, page, per_page))

    async def get_posts_unread(self, channel_id: str) -> PostList:
        """Get unread posts in a channel for the authenticated user."""
        me = await self._api.get_me()
        return PostList.from_api(
            await self._api.get_posts_unread(
                channel_id, me["id"], UNREAD_LIMIT_AFTER, 0, True
            )
        )

    async def create_post(
        self, channel_id: str, message: str, root_id: str | None = None
    ) -> Post:
        """Create a post, optionally as a reply in a thread.

        Raises:
            MattermostApiError: If the server rejects the post.
        """
        post_data = {"channel_id": channel_id, "message": message, "root_id": root_id}
        self._logger.debug("createPost request", url=self._config.url, post=post_data)
        try:
            created = await self._api.create_post(post_data)
        except MattermostApiError as e:
            self._logger.error(
                "createPost failed", post=post_data, error=str(e), **e.details()
            )
            raise
        self._logger.debug("createPost success", post_id=created.get("id"))
        return Post.model_validate(created)

    async def get_posts_thread(
        self,
        root_id: str,
        from_post: str | None = None,
        per_page: int | None = None,
    ) -> PostList:
        """Get a page of a thread, walking up from ``from_post``."""
        options: dict[str, Any] = {"direction": "up"}
        if from_post is not None:
            options["fromPost"] = from_post
        if per_page is not None:
            options["perPage"] = per_page
        return PostList.from_api(
            await self._api.get_paginated_post_thread(root_id, options)
        )

    async def pin_post(self, post_id: str) -> JSON:
        return await self._api.pin_post(post_id)

    async def unpin_post(self, post_id: str) -> JSON:
        return await self._api.unpin_post(post_id)

    async def get_pinned_posts(self, channel_id: str) -> PostList:
        return PostList.from_api(await self._api.get_pinned_posts(channel_id))

    # Reactions

    async def add_reaction(self, post_id: str, emoji_name: str) -> Reaction:
        """React to a post as the authenticated user."""
        me = await self._api.get_me()
        return Reaction.model_validate(
            await self._api.add_reaction(me["id"], post_id, emoji_name)
        )

    async def remove_reaction(self, post_id: str, emoji_name: str) -> JSON:
        """Remove the authenticated user's reaction from a post."""
        me = await self._api.get_me()
        return await self._api.remove_reaction(me["id"], post_id, emoji_name)

    async def get_reactions_for_post(self, post_id: str) -> list[Reaction]:
        reactions = await self._api.get_reactions_for_post(post_id)
        return [Reaction.model_validate(reaction) for reaction in reactions]
