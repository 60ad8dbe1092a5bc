"""Jira Cloud client (REST API v3)."""

import base64
from urllib.parse import quote

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

CLOSED_STATUSES = frozenset({"Done", "Closed", "Resolved"})


class JiraClient(IssueTrackerClient):
    """Validates `PROJ-123` keys with basic auth (email + API token)."""

    tracker_name = "Jira"

    def __init__(self, settings: TrackerSettings, **kwargs):
        super().__init__(settings, **kwargs)
        if not settings.jira_base_url:
            raise TrackerConfigurationError("jiraBaseUrl")
        self.token = resolve_token(settings.jira_token)
        self.email = settings.jira_email
        if not self.token or not self.email:
            raise TrackerConfigurationError("jiraToken/jiraEmail")
        self.base_url = settings.jira_base_url.rstrip("/")

    def _auth_header(self) -> str:
        credentials = base64.b64encode(f"{self.email}:{self.token}".encode()).decode("ascii")
        return f"Basic {credentials}"

    async def _validate(self, session: aiohttp.ClientSession, ticket_id: str) -> TicketStatus:
        url = f"{self.base_url}/rest/api/3/issue/{quote(ticket_id, safe='')}"
        response = await self._request(
            session, "GET", url, headers={"Authorization": self._auth_header()}
        )

        if response.status == 404:
            return TicketStatus(exists=False)
        if response.status in (401, 403):
            return TicketStatus.failure(AUTH_FAILED)
        if response.status == 200 and isinstance(response.data, dict):
            fields = response.data.get("fields") or {}
            status = (fields.get("status") or {}).get("name")
            return TicketStatus(
                exists=True,
                closed=status in CLOSED_STATUSES,
                status=status,
                title=fields.get("summary"),
            )
        return TicketStatus.failure(UNREACHABLE, message=f"HTTP {response.status}")
