"""Client for a self-hosted tracker behind a URL template."""

from urllib.parse import quote

import aiohttp

from .base import (
    AUTH_FAILED,
    UNREACHABLE,
    IssueTrackerClient,
    TicketStatus,
    TrackerConfigurationError,
    TrackerSettings,
)

TICKET_PLACEHOLDER = "{{ticketId}}"


class CustomClient(IssueTrackerClient):
    """GETs `customApiUrl` with `{{ticketId}}` replaced by the ticket id.

    A 2xx response means the ticket exists. The JSON body may carry
    `status`, `title` (or `name`), and `closed` or `state: "closed"`.
    """

    tracker_name = "custom tracker"

    def __init__(self, settings: TrackerSettings, **kwargs):
        super().__init__(settings, **kwargs)
        if not settings.custom_api_url:
            raise TrackerConfigurationError("customApiUrl")
        self.url_template = settings.custom_api_url
        self.headers = dict(settings.custom_headers)

    def url_for(self, ticket_id: str) -> str:
        return self.url_template.replace(TICKET_PLACEHOLDER, quote(ticket_id, safe=""))

    async def _validate(self, session: aiohttp.ClientSession, ticket_id: str) -> TicketStatus:
        response = await self._request(session, "GET", self.url_for(ticket_id), headers=self.headers)

        if response.status == 404:
            return TicketStatus(exists=False)
        if response.status in (401, 403):
            return TicketStatus.failure(AUTH_FAILED)
        if response.is_success:
            data = response.data if isinstance(response.data, dict) else {}
            return TicketStatus(
                exists=True,
                closed=bool(data.get("closed")) or data.get("state") == "closed",
                status=data.get("status") or "unknown",
                title=data.get("title") or data.get("name"),
            )
        return TicketStatus.failure(UNREACHABLE, message=f"HTTP {response.status}")
