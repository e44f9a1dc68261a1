"""Team resolution from configured IDs, names, or membership."""

from collections.abc import Awaitable, Callable, Iterable
from http import HTTPStatus

from structlog.stdlib import BoundLogger

from mcp_mattermost.config.models import MattermostConfig
from mcp_mattermost.domain.entities.team import Team
from mcp_mattermost.domain.errors import (
    MattermostApiError,
    NoTeamsFoundError,
    TeamNotFoundError,
)
from mcp_mattermost.domain.repositories.mattermost_api import JSON, MattermostApi


class TeamResolver:
    """Resolve configuration into the ordered set of working team IDs.

    Resolution order:
    1. ``team_ids``, each looked up by ID.
    2. ``team_names``, each looked up by name.
    3. Only if both yield nothing: every team the user belongs to.

    The result is deduplicated keeping the first occurrence, so IDs from
    ``team_ids`` take precedence in ordering over those from ``team_names``.
    """

    def __init__(self, api: MattermostApi, logger: BoundLogger) -> None:
        self._api = api
        self._logger = logger

    async def resolve(self, config: MattermostConfig) -> tuple[str, ...]:
        """Resolve team IDs for the given configuration.

        Lookups run sequentially; the first failure aborts resolution.

        Args:
            config: Mattermost configuration holding team_ids/team_names.

        Returns:
            Deduplicated team IDs in resolution order.

        Raises:
            TeamNotFoundError: If a configured team ID or name does not resolve.
            NoTeamsFoundError: If auto-discovery returns no teams.
            MattermostApiError: On any other remote failure.
        """
        resolved: list[str] = []

        for team_id in config.team_ids or []:
            team = await self._lookup(self._api.get_team, team_id, by="ID")
            resolved.append(team.id)

        for team_name in config.team_names or []:
            team = await self._lookup(self._api.get_team_by_name, team_name, by="name")
            resolved.append(team.id)

        if not resolved:
            my_teams = await self._api.get_my_teams()
            if not my_teams:
                raise NoTeamsFoundError()
            resolved.extend(Team.model_validate(raw).id for raw in my_teams)
            self._logger.info("Auto-discovered teams", team_count=len(my_teams))

        team_ids = dedupe(resolved)
        self._logger.info("Resolved teams", team_ids=list(team_ids))
        return team_ids

    async def _lookup(
        self,
        fetch: Callable[[str], Awaitable[JSON | None]],
        key: str,
        by: str,
    ) -> Team:
        try:
            raw = await fetch(key)
        except MattermostApiError as e:
            if e.status_code == HTTPStatus.NOT_FOUND:
                raise TeamNotFoundError(key, by=by) from e
            raise
        if not raw:
            raise TeamNotFoundError(key, by=by)
        return Team.model_validate(raw)


def dedupe(values: Iterable[str]) -> tuple[str, ...]:
    """Remove duplicates, keeping the first occurrence of each value."""
    return tuple(dict.fromkeys(values))
