"""Post and PostList entities."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mcp_mattermost.domain.entities.timestamps import EpochMillis, EpochMillisOrUnset


class Post(BaseModel):
    """A single Mattermost message with normalized timestamps.

    Attributes:
        id: Post ID.
        channel_id: Channel the post belongs to.
        user_id: Author's user ID.
        root_id: Thread root post ID, empty for a root post.
        message: Message text.
        create_at: Creation time.
        update_at: Last update time.
        edit_at: Last edit time, None if never edited.
        delete_at: Deletion time, None if not deleted.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    channel_id: str = ""
    user_id: str = ""
    root_id: str = ""
    message: str = ""
    create_at: EpochMillis = None
    update_at: EpochMillis = None
    edit_at: EpochMillisOrUnset = None
    delete_at: EpochMillisOrUnset = None


class PostList(BaseModel):
    """Ordered collection of posts.

    ``order`` is authoritative: iteration and display follow it, and
    ``posts`` holds exactly one entry per id in ``order``.
    """

    model_config = ConfigDict(extra="allow")

    order: list[str] = Field(default_factory=list)
    posts: dict[str, Post] = Field(default_factory=dict)
    next_post_id: str = ""
    prev_post_id: str = ""

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "PostList":
        """Build a PostList from a raw API response.

        Posts not referenced by ``order`` are dropped, as are ids in
        ``order`` that have no body in ``posts``.

        Args:
            raw: Decoded JSON post list as returned by the server.

        Returns:
            PostList with every contained post normalized once.
        """
        raw_posts: dict[str, Any] = raw.get("posts") or {}
        order = [post_id for post_id in raw.get("order") or [] if post_id in raw_posts]
        extras = {k: v for k, v in raw.items() if k not in ("order", "posts")}
        return cls(
            **extras,
            order=order,
            posts={post_id: Post.model_validate(raw_posts[post_id]) for post_id in order},
        )

    def ordered_posts(self) -> list[Post]:
        """Return posts in ``order`` sequence."""
        return [self.posts[post_id] for post_id in self.order]
