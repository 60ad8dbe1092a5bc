"""GitLab Issues client (API v4)."""

import re
from urllib.parse import quote

import aiohttp

from .base import (
    AUTH_FAILED,
    INVALID_FORMAT,
    UNREACHABLE,
    IssueTrackerClient,
    TicketStatus,
    TrackerConfigurationError,
    TrackerSettings,
    resolve_token,
)

ISSUE_NUMBER = re.compile(r"#?(\d+)")


class GitLabClient(IssueTrackerClient):
    """Validates `#123` references against one GitLab project."""

    tracker_name = "GitLab"

    def __init__(self, settings: TrackerSettings, **kwargs):
        super().__init__(settings, **kwargs)
        if not settings.gitlab_project_id:
            raise TrackerConfigurationError("gitlabProjectId")
        self.project_id = settings.gitlab_project_id
        self.token = resolve_token(settings.gitlab_token)
        self.base_url = settings.gitlab_base_url.rstrip("/")

    async def _validate(self, session: aiohttp.ClientSession, ticket_id: str) -> TicketStatus:
        match = ISSUE_NUMBER.search(ticket_id)
        if match is None:
            return TicketStatus.failure(INVALID_FORMAT)

        headers = {"PRIVATE-TOKEN": self.token} if self.token else {}
        project = quote(self.project_id, safe="")
        url = f"{self.base_url}/api/v4/projects/{project}/issues/{match[1]}"
        response = await self._request(session, "GET", url, headers=headers)

        if response.status == 404:
            return TicketStatus(exists=False)
        if response.status in (401, 403):
            return TicketStatus.failure(AUTH_FAILED)
        if response.status == 200 and isinstance(response.data, dict):
            state = response.data.get("state")
            return TicketStatus(
                exists=True,
                closed=state == "closed",
                status=state,
                title=response.data.get("title"),
            )
        return TicketStatus.failure(UNREACHABLE, message=f"HTTP {response.status}")
