"""Merging of per-team results into a single view.

All helpers operate on raw API payloads so that normalization happens once,
after merging.
"""

from collections.abc import Iterable, Sequence

from mcp_mattermost.domain.entities.channel import ChannelType
from mcp_mattermost.domain.repositories.mattermost_api import JSON

LISTED_CHANNEL_TYPES = frozenset({ChannelType.OPEN.value, ChannelType.PRIVATE.value})


def merge_post_lists(post_lists: Sequence[JSON]) -> JSON:
    """Merge raw post lists, deduplicating by post ID.

    Lists are walked in the order given. A post ID keeps the position where
    it was first seen in ``order``; its body is taken from the last list
    that contains it.

    Args:
        post_lists: Raw post lists, one per team, in resolved team order.

    Returns:
        Raw post list with ``order`` and ``posts``.
    """
    order: dict[str, None] = {}
    posts: dict[str, JSON] = {}

    for post_list in post_lists:
        list_posts = post_list.get("posts") or {}
        for post_id in post_list.get("order") or []:
            order.setdefault(post_id, None)
            if post_id in list_posts:
                posts[post_id] = list_posts[post_id]

    return {"order": list(order), "posts": posts}


def dedupe_channels(channels: Iterable[JSON]) -> list[JSON]:
    """Deduplicate channels by ID.

    The first occurrence fixes the position and the last occurrence
    supplies the content.
    """
    unique: dict[str, JSON] = {}
    for channel in channels:
        unique[channel["id"]] = channel
    return list(unique.values())


def filter_listed_channels(channels: Iterable[JSON]) -> list[JSON]:
    """Keep open and private channels only."""
    return [ch for ch in channels if ch.get("type") in LISTED_CHANNEL_TYPES]
