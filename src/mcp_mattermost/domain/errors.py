"""Domain errors for team resolution and team-scoped operations."""


class MattermostMcpError(Exception):
    """Base exception for mcp-mattermost errors."""


class MattermostApiError(MattermostMcpError):
    """Raised by the API client when a remote call fails.

    Attributes:
        status_code: HTTP status code, None for transport failures.
        server_error_id: Mattermost error id (e.g. ``app.team.get.find.app_error``).
        url: Request URL that failed.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        server_error_id: str | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.server_error_id = server_error_id
        self.url = url

    def details(self) -> dict[str, object]:
        """Return remote error detail suitable for structured logging."""
        return {
            "status_code": self.status_code,
            "server_error_id": self.server_error_id,
            "url": self.url,
        }


class TeamNotFoundError(MattermostMcpError):
    """Raised when a configured team ID or name does not resolve."""

    def __init__(self, team: str, by: str = "ID") -> None:
        self.team = team
        super().__init__(f"Team with {by} '{team}' not found or not accessible")


class NoTeamsFoundError(MattermostMcpError):
    """Raised when auto-discovery finds no teams for the current user."""

    def __init__(self) -> None:
        super().__init__("No teams found for the current user/bot")


class NoTeamsConfiguredError(MattermostMcpError):
    """Raised when a team-scoped operation runs without a resolved team set."""

    def __init__(self) -> None:
        super().__init__("No teams configured")


class ChannelNotFoundError(MattermostMcpError):
    """Raised when a channel name matches in none of the resolved teams."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Channel '{name}' not found in any configured team")
