"""GitHub Issues client."""

import re

import aiohttp

from .base import (
    AUTH_FAILED,
    INVALID_FORMAT,
    RATE_LIMITED,
    UNREACHABLE,
    IssueTrackerClient,
    TicketStatus,
    TrackerConfigurationError,
    TrackerSettings,
    resolve_token,
)

ISSUE_NUMBER = re.compile(r"(?:GH-|#)?(\d+)", re.IGNORECASE)


class GitHubClient(IssueTrackerClient):
    """Validates `#123` / `GH-123` references against one repository."""

    tracker_name = "GitHub"

    def __init__(self, settings: TrackerSettings, **kwargs):
        super().__init__(settings, **kwargs)
        if not settings.github_repo:
            raise TrackerConfigurationError("githubRepo")
        self.repo = settings.github_repo
        self.token = resolve_token(settings.github_token)
        self.api_url = settings.github_api_url.rstrip("/")

    async def _validate(self, session: aiohttp.ClientSession, ticket_id: str) -> TicketStatus:
        match = ISSUE_NUMBER.search(ticket_id)
        if match is None:
            return TicketStatus.failure(INVALID_FORMAT)

        headers = {"Authorization": f"token {self.token}"} if self.token else {}
        url = f"{self.api_url}/repos/{self.repo}/issues/{match[1]}"
        response = await self._request(session, "GET", url, headers=headers)

        if response.status == 404:
            return TicketStatus(exists=False)
        if response.status == 401:
            return TicketStatus.failure(AUTH_FAILED)
        if response.status == 403:
            if response.headers.get("x-ratelimit-remaining") == "0":
                return TicketStatus.failure(RATE_LIMITED)
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
