"""Linear client (GraphQL API)."""

import aiohttp

from .base import (
    AUTH_FAILED,
    UNREACHABLE,
    IssueTrackerClient,
    TicketStatus,
    TrackerConfigurationError,
    TrackerSettings,
    resolve_token,
)

ISSUE_QUERY = "query IssueQuery($id: String!) { issue(id: $id) { id title state { name type } } }"

CLOSED_STATE_TYPES = frozenset({"completed", "canceled"})


class LinearClient(IssueTrackerClient):
    """Validates Linear identifiers such as `ENG-123`."""

    tracker_name = "Linear"

    def __init__(self, settings: TrackerSettings, **kwargs):
        super().__init__(settings, **kwargs)
        self.token = resolve_token(settings.linear_token)
        if not self.token:
            raise TrackerConfigurationError("linearToken")
        self.api_url = settings.linear_api_url

    async def _validate(self, session: aiohttp.ClientSession, ticket_id: str) -> TicketStatus:
        response = await self._request(
            session,
            "POST",
            self.api_url,
            headers={"Authorization": self.token},
            json={"query": ISSUE_QUERY, "variables": {"id": ticket_id}},
        )

        if response.status in (401, 403):
            return TicketStatus.failure(AUTH_FAILED)
        if response.status != 200 or not isinstance(response.data, dict):
            return TicketStatus.failure(UNREACHABLE, message=f"HTTP {response.status}")

        # Linear answers unknown identifiers with a null issue (and an errors list)
        issue = (response.data.get("data") or {}).get("issue")
        if not issue:
            return TicketStatus(exists=False)

        state = issue.get("state") or {}
        return TicketStatus(
            exists=True,
            closed=state.get("type") in CLOSED_STATE_TYPES,
            status=state.get("name"),
            title=issue.get("title"),
        )
