"""MCP tool definitions for the Mattermost service."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from structlog.stdlib import BoundLogger

from mcp_mattermost.application.services.mattermost_service import MattermostService
from mcp_mattermost.presentation.mcp.response import handle_tool_call


class ToolParams(BaseModel):
    """Base for tool parameter models; arguments use camelCase names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NoParams(ToolParams):
    pass


class UserIdParams(ToolParams):
    user_id: str = Field(..., min_length=1, description="User ID")


class UsernameParams(ToolParams):
    username: str = Field(..., min_length=1, description="Username without the leading @")


class SearchUsersParams(ToolParams):
    term: str = Field(..., min_length=1, description="Search term")


class SearchChannelsParams(ToolParams):
    term: str = Field(..., min_length=1, description="Search term")
    page: int = Field(default=0, ge=0, description="Page number, starting at 0")
    per_page: int = Field(default=100, ge=1, le=200, description="Results per page")


class ChannelIdParams(ToolParams):
    channel_id: str = Field(..., min_length=1, description="Channel ID")


class ChannelNameParams(ToolParams):
    name: str = Field(..., min_length=1, description="Channel name (URL name, not display name)")


class SearchPostsParams(ToolParams):
    terms: str = Field(..., min_length=1, description="Search terms, Mattermost search syntax")
    page: int = Field(default=0, ge=0, description="Page number, starting at 0")
    per_page: int = Field(default=100, ge=1, le=200, description="Results per page")


class PostIdParams(ToolParams):
    post_id: str = Field(..., min_length=1, description="Post ID")


class ChannelPostsParams(ToolParams):
    channel_id: str = Field(..., min_length=1, description="Channel ID")
    page: int = Field(default=0, ge=0, description="Page number, starting at 0")
    per_page: int = Field(default=30, ge=1, le=200, description="Posts per page")


class CreatePostParams(ToolParams):
    channel_id: str = Field(..., min_length=1, description="Channel ID to post in")
    message: str = Field(..., min_length=1, description="Message text (Markdown)")
    root_id: str | None = Field(
        default=None, description="Root post ID when replying in a thread"
    )


class ThreadParams(ToolParams):
    root_id: str = Field(..., min_length=1, description="Root post ID of the thread")
    from_post: str | None = Field(
        default=None, description="Post ID to continue paging from"
    )
    per_page: int | None = Field(default=None, ge=1, le=200, description="Posts per page")


class ReactionParams(ToolParams):
    post_id: str = Field(..., min_length=1, description="Post ID")
    emoji_name: str = Field(
        ..., min_length=1, description="Emoji name without colons (e.g. 'thumbsup')"
    )


@dataclass(frozen=True)
class ToolDefinition:
    """An MCP tool bound to a MattermostService operation."""

    name: str
    description: str
    params: type[ToolParams]
    run: Callable[[MattermostService, Any], Awaitable[Any]]

    def input_schema(self) -> dict[str, Any]:
        """Return the JSON schema advertised in tools/list."""
        schema = self.params.model_json_schema(by_alias=True)
        schema.pop("title", None)
        schema.setdefault("properties", {})
        return schema


TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="mattermost_get_me",
        description="Get the user the server is authenticated as",
        params=NoParams,
        run=lambda service, p: service.get_me(),
    ),
    ToolDefinition(
        name="mattermost_get_user",
        description="Get a user by ID",
        params=UserIdParams,
        run=lambda service, p: service.get_user(p.user_id),
    ),
    ToolDefinition(
        name="mattermost_get_user_by_username",
        description="Get a user by username",
        params=UsernameParams,
        run=lambda service, p: service.get_user_by_username(p.username),
    ),
    ToolDefinition(
        name="mattermost_search_users",
        description="Search users by username, name, nickname or email",
        params=SearchUsersParams,
        run=lambda service, p: service.search_users(p.term),
    ),
    ToolDefinition(
        name="mattermost_search_channels",
        description="Search channels in all configured teams",
        params=SearchChannelsParams,
        run=lambda service, p: service.search_channels(p.term, p.page, p.per_page),
    ),
    ToolDefinition(
        name="mattermost_get_channel",
        description="Get a channel by ID",
        params=ChannelIdParams,
        run=lambda service, p: service.get_channel(p.channel_id),
    ),
    ToolDefinition(
        name="mattermost_get_channel_by_name",
        description="Get a channel by name, searching the configured teams in order",
        params=ChannelNameParams,
        run=lambda service, p: service.get_channel_by_name(p.name),
    ),
    ToolDefinition(
        name="mattermost_get_my_channels",
        description="List open and private channels the user belongs to in all configured teams",
        params=NoParams,
        run=lambda service, p: service.get_my_channels(),
    ),
    ToolDefinition(
        name="mattermost_search_posts",
        description="Search posts in all configured teams",
        params=SearchPostsParams,
        run=lambda service, p: service.search_posts(p.terms, p.page, p.per_page),
    ),
    ToolDefinition(
        name="mattermost_get_post",
        description="Get a post by ID",
        params=PostIdParams,
        run=lambda service, p: service.get_post(p.post_id),
    ),
    ToolDefinition(
        name="mattermost_get_posts",
        description="Get recent posts in a channel, newest first",
        params=ChannelPostsParams,
        run=lambda service, p: service.get_posts_for_channel(
            p.channel_id, p.page, p.per_page
        ),
    ),
    ToolDefinition(
        name="mattermost_get_posts_unread",
        description="Get unread posts in a channel",
        params=ChannelIdParams,
        run=lambda service, p: service.get_posts_unread(p.channel_id),
    ),
    ToolDefinition(
        name="mattermost_create_post",
        description="Create a post in a channel, or a reply when rootId is given",
        params=CreatePostParams,
        run=lambda service, p: service.create_post(p.channel_id, p.message, p.root_id),
    ),
    ToolDefinition(
        name="mattermost_get_posts_thread",
        description="Get posts in a thread",
        params=ThreadParams,
        run=lambda service, p: service.get_posts_thread(
            p.root_id, p.from_post, p.per_page
        ),
    ),
    ToolDefinition(
        name="mattermost_pin_post",
        description="Pin a post to its channel",
        params=PostIdParams,
        run=lambda service, p: service.pin_post(p.post_id),
    ),
    ToolDefinition(
        name="mattermost_unpin_post",
        description="Unpin a post from its channel",
        params=PostIdParams,
        run=lambda service, p: service.unpin_post(p.post_id),
    ),
    ToolDefinition(
        name="mattermost_get_pinned_posts",
        description="Get pinned posts in a channel",
        params=ChannelIdParams,
        run=lambda service, p: service.get_pinned_posts(p.channel_id),
    ),
    ToolDefinition(
        name="mattermost_add_reaction",
        description="Add an emoji reaction to a post",
        params=ReactionParams,
        run=lambda service, p: service.add_reaction(p.post_id, p.emoji_name),
    ),
    ToolDefinition(
        name="mattermost_remove_reaction",
        description="Remove your emoji reaction from a post",
        params=ReactionParams,
        run=lambda service, p: service.remove_reaction(p.post_id, p.emoji_name),
    ),
    ToolDefinition(
        name="mattermost_get_reactions_for_post",
        description="List reactions on a post",
        params=PostIdParams,
        run=lambda service, p: service.get_reactions_for_post(p.post_id),
    ),
)


class UnknownToolError(Exception):
    """Raised when a tools/call names a tool that is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ToolRegistry:
    """Registry of MCP tools bound to a MattermostService.

    Args:
        service: Initialized MattermostService.
        logger: Structured logger used for tool failures.
    """

    def __init__(self, service: MattermostService, logger: BoundLogger) -> None:
        self._service = service
        self._logger = logger
        self._tools: dict[str, ToolDefinition] = {}

    @classmethod
    def default(cls, service: MattermostService, logger: BoundLogger) -> "ToolRegistry":
        """Create a registry holding every Mattermost tool."""
        registry = cls(service, logger)
        for tool in TOOL_DEFINITIONS:
            registry.register(tool)
        return registry

    def register(self, tool: ToolDefinition) -> None:
        """Register a tool, replacing any tool of the same name."""
        self._tools[tool.name] = tool

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def list_tools(self) -> list[dict[str, Any]]:
        """Describe registered tools in tools/list format."""
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "inputSchema": tool.input_schema(),
            }
            for tool in self._tools.values()
        ]

    async def call(self, name: str, arguments: dict[str, Any] | None) -> dict[str, Any]:
        """Validate arguments and run a tool.

        Args:
            name: Tool name.
            arguments: Raw tool arguments.

        Returns:
            CallToolResult envelope. Service errors are reported inside it.

        Raises:
            UnknownToolError: If no tool has that name.
            ValidationError: If the arguments do not match the tool's schema.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name)
        params = tool.params.model_validate(arguments or {})
        self._logger.info("Tool call", tool=name)
        return await handle_tool_call(tool.run(self._service, params), self._logger, name)
