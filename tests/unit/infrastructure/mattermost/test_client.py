"""Tests for MattermostClient against a fake Mattermost server."""

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from mcp_mattermost.domain.errors import MattermostApiError
from mcp_mattermost.infrastructure.mattermost.client import MattermostClient

ServerFactory = Callable[[web.Application], Awaitable[TestServer]]


class FakeMattermost:
    """Records requests and answers with canned responses per route."""

    def __init__(self) -> None:
        self.requests: list[dict[str, Any]] = []
        self.responses: dict[tuple[str, str], web.Response] = {}

    def respond(self, method: str, path: str, response: web.Response) -> None:
        self.responses[(method, path)] = response

    async def handle(self, request: web.Request) -> web.StreamResponse:
        body = await request.json() if request.can_read_body else None
        self.requests.append(
            {
                "method": request.method,
                "path": request.raw_path.split("?")[0],
                "query": dict(request.query),
                "headers": dict(request.headers),
                "body": body,
            }
        )
        key = (request.method, request.raw_path.split("?")[0])
        if key in self.responses:
            return self.responses[key]
        return web.json_response(
            {"id": "api.context.404.app_error", "message": "Sorry, not found."},
            status=404,
        )


@pytest.fixture
def fake() -> FakeMattermost:
    return FakeMattermost()


@pytest.fixture
async def client(
    aiohttp_server: ServerFactory, fake: FakeMattermost
) -> AsyncIterator[MattermostClient]:
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", fake.handle)
    server = await aiohttp_server(app)
    mm_client = MattermostClient(str(server.make_url("/")), "secret-token")
    yield mm_client
    await mm_client.close()


class TestRequest:
    """Tests for request plumbing."""

    async def test_sends_bearer_token(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond("GET", "/api/v4/users/me", web.json_response({"id": "me"}))

        result = await client.get_me()

        assert result == {"id": "me"}
        assert fake.requests[0]["headers"]["Authorization"] == "Bearer secret-token"

    async def test_base_url_has_api_prefix(self) -> None:
        mm_client = MattermostClient("https://mm.example.com/", "t")

        assert mm_client.base_url == "https://mm.example.com/api/v4"

    async def test_path_segments_are_escaped(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond(
            "GET",
            "/api/v4/users/username/a%2Fb",
            web.json_response({"id": "u1"}),
        )

        result = await client.get_user_by_username("a/b")

        assert result == {"id": "u1"}

    async def test_error_response_is_parsed(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond(
            "GET",
            "/api/v4/teams/name/missing",
            web.json_response(
                {
                    "id": "app.team.get_by_name.missing.app_error",
                    "message": "Unable to find the existing team.",
                    "status_code": 404,
                },
                status=404,
            ),
        )

        with pytest.raises(MattermostApiError) as exc_info:
            await client.get_team_by_name("missing")

        error = exc_info.value
        assert str(error) == "Unable to find the existing team."
        assert error.status_code == 404
        assert error.server_error_id == "app.team.get_by_name.missing.app_error"
        assert error.url is not None
        assert error.url.endswith("/api/v4/teams/name/missing")

    async def test_error_response_without_json_body(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond("GET", "/api/v4/users/me", web.Response(status=502, text="bad"))

        with pytest.raises(MattermostApiError) as exc_info:
            await client.get_me()

        assert exc_info.value.status_code == 502
        assert exc_info.value.server_error_id is None
        assert "502" in str(exc_info.value)

    async def test_transport_error_is_wrapped(self) -> None:
        # Nothing listens on port 1
        mm_client = MattermostClient("http://127.0.0.1:1", "t", timeout=2.0)
        try:
            with pytest.raises(MattermostApiError) as exc_info:
                await mm_client.get_me()
        finally:
            await mm_client.close()

        assert exc_info.value.status_code is None
        assert exc_info.value.url == "http://127.0.0.1:1/api/v4/users/me"

    async def test_close_is_idempotent(self, client: MattermostClient) -> None:
        await client.close()
        await client.close()


class TestEndpoints:
    """Tests for individual endpoint mappings."""

    async def test_get_my_teams(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond(
            "GET", "/api/v4/users/me/teams", web.json_response([{"id": "t1"}])
        )

        assert await client.get_my_teams() == [{"id": "t1"}]

    async def test_search_all_channels_unwraps_paged_form(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond(
            "POST",
            "/api/v4/channels/search",
            web.json_response({"channels": [{"id": "c1"}], "total_count": 1}),
        )

        result = await client.search_all_channels(
            "town", {"team_ids": ["t1", "t2"], "page": 0, "per_page": 100}
        )

        assert result == [{"id": "c1"}]
        assert fake.requests[0]["body"] == {
            "term": "town",
            "team_ids": ["t1", "t2"],
            "page": 0,
            "per_page": 100,
        }

    async def test_search_all_channels_plain_list(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond(
            "POST", "/api/v4/channels/search", web.json_response([{"id": "c1"}])
        )

        assert await client.search_all_channels("town", {}) == [{"id": "c1"}]

    async def test_search_posts_defaults_to_and_search(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond(
            "POST",
            "/api/v4/teams/t1/posts/search",
            web.json_response({"order": [], "posts": {}}),
        )

        await client.search_posts_with_params(
            "t1", {"terms": "deploy", "page": 0, "per_page": 100}
        )

        assert fake.requests[0]["body"] == {
            "is_or_search": False,
            "terms": "deploy",
            "page": 0,
            "per_page": 100,
        }

    async def test_get_posts_sends_paging(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond(
            "GET",
            "/api/v4/channels/c1/posts",
            web.json_response({"order": [], "posts": {}}),
        )

        await client.get_posts("c1", 2, 30)

        assert fake.requests[0]["query"] == {"page": "2", "per_page": "30"}

    async def test_get_posts_unread_query(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond(
            "GET",
            "/api/v4/users/u1/channels/c1/posts/unread",
            web.json_response({"order": [], "posts": {}}),
        )

        await client.get_posts_unread("c1", "u1", 30, 0, True)

        assert fake.requests[0]["query"] == {
            "limit_after": "30",
            "limit_before": "0",
            "skipFetchThreads": "true",
        }

    async def test_create_post_drops_unset_fields(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond(
            "POST", "/api/v4/posts", web.json_response({"id": "p1"}, status=201)
        )

        await client.create_post(
            {"channel_id": "c1", "message": "hello", "root_id": None}
        )

        assert fake.requests[0]["body"] == {"channel_id": "c1", "message": "hello"}

    async def test_thread_omits_unset_options(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond(
            "GET",
            "/api/v4/posts/root1/thread",
            web.json_response({"order": [], "posts": {}}),
        )

        await client.get_paginated_post_thread(
            "root1", {"direction": "up", "fromPost": None, "perPage": 50}
        )

        assert fake.requests[0]["query"] == {"direction": "up", "perPage": "50"}

    async def test_remove_reaction_path(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond(
            "DELETE",
            "/api/v4/users/u1/posts/p1/reactions/thumbsup",
            web.json_response({"status": "OK"}),
        )

        result = await client.remove_reaction("u1", "p1", "thumbsup")

        assert result == {"status": "OK"}

    async def test_add_reaction_body(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond(
            "POST", "/api/v4/reactions", web.json_response({"emoji_name": "tada"})
        )

        await client.add_reaction("u1", "p1", "tada")

        assert fake.requests[0]["body"] == {
            "user_id": "u1",
            "post_id": "p1",
            "emoji_name": "tada",
        }

    async def test_reactions_null_becomes_empty_list(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond(
            "GET", "/api/v4/posts/p1/reactions", web.json_response(None)
        )

        assert await client.get_reactions_for_post("p1") == []

    async def test_pin_and_pinned(
        self, client: MattermostClient, fake: FakeMattermost
    ) -> None:
        fake.respond("POST", "/api/v4/posts/p1/pin", web.json_response({"status": "OK"}))
        fake.respond(
            "GET",
            "/api/v4/channels/c1/pinned",
            web.json_response({"order": ["p1"], "posts": {"p1": {"id": "p1"}}}),
        )

        await client.pin_post("p1")
        pinned = await client.get_pinned_posts("c1")

        assert pinned["order"] == ["p1"]
        assert [r["path"] for r in fake.requests] == [
            "/api/v4/posts/p1/pin",
            "/api/v4/channels/c1/pinned",
        ]
