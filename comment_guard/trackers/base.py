"""
Shared plumbing for issue-tracker clients.

Each client answers one question: does a ticket exist and is it closed?
Lookups go through aiohttp, results are cached per client for
`cache_timeout` seconds, and transport failures come back as a
TicketStatus carrying an error kind instead of raising.
"""

import asyncio
import logging
import os
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .. import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"comment-guard/{__version__}"
DEFAULT_TIMEOUT_SECONDS = 10.0

# Error kinds carried by TicketStatus.error
MISSING_CONFIG = "missingConfig"
AUTH_FAILED = "authFailed"
RATE_LIMITED = "rateLimited"
UNREACHABLE = "unreachable"
INVALID_FORMAT = "invalidFormat"


class TrackerSettings(BaseModel):
    """Connection settings for every supported tracker.

    Token fields may be written as `$ENV_VAR` to read them from the
    environment at client construction time.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        frozen=True,
    )

    tracker: str | None = None
    github_repo: str | None = None
    github_token: str | None = None
    github_api_url: str = "https://api.github.com"
    jira_base_url: str | None = None
    jira_token: str | None = None
    jira_email: str | None = None
    gitlab_base_url: str = "https://gitlab.com"
    gitlab_token: str | None = None
    gitlab_project_id: str | None = None
    linear_token: str | None = None
    linear_api_url: str = "https://api.linear.app/graphql"
    custom_api_url: str | None = None
    custom_headers: dict[str, str] = Field(default_factory=dict)
    cache_timeout: float = Field(default=3600, ge=0)
    request_timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)


class TrackerConfigurationError(ValueError):
    """A tracker cannot be used because a setting is missing or invalid."""

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"Issue tracker setting '{field}' is not configured")


@dataclass(frozen=True)
class TicketStatus:
    """Outcome of one ticket lookup.

    Either `error` is set (and the other fields are meaningless), or
    `exists` / `closed` describe the ticket.
    """

    exists: bool = False
    closed: bool = False
    status: str | None = None
    title: str | None = None
    error: str | None = None
    field: str | None = None
    message: str | None = None

    @classmethod
    def failure(
        cls, error: str, message: str | None = None, field: str | None = None
    ) -> "TicketStatus":
        return cls(error=error, message=message, field=field)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class HttpResponse:
    """Status, decoded JSON body and headers of a finished request."""

    status: int
    data: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300


def resolve_token(value: str | None) -> str | None:
    """Resolve `$NAME` to the NAME environment variable; other values pass through."""
    if value and value.startswith("$"):
        return os.environ.get(value[1:]) or None
    return value or None


class IssueTrackerClient(ABC):
    """Base class for tracker clients.

    Subclasses implement `_validate` for a single ticket using the given
    session. Callers use `validate_ticket` or, for a batch,
    `validate_tickets`, which share one session across lookups.
    """

    # Display name used in log messages
    tracker_name: str = "tracker"

    def __init__(
        self,
        settings: TrackerSettings,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings
        self._clock = clock
        self._cache: dict[str, tuple[float, TicketStatus]] = {}

    def cache_key(self, ticket_id: str) -> str:
        return f"{type(self).__name__}_{ticket_id}"

    def default_headers(self) -> dict[str, str]:
        return {"User-Agent": USER_AGENT, "Accept": "application/json"}

    def open_session(self) -> aiohttp.ClientSession:
        """Create a session with this client's timeout and default headers."""
        return aiohttp.ClientSession(
            headers=self.default_headers(),
            timeout=aiohttp.ClientTimeout(total=self.settings.request_timeout),
        )

    def _cached(self, ticket_id: str) -> TicketStatus | None:
        entry = self._cache.get(self.cache_key(ticket_id))
        if entry is None:
            return None
        stored_at, status = entry
        if self._clock() - stored_at >= self.settings.cache_timeout:
            return None
        return status

    def clear_cache(self) -> None:
        self._cache.clear()

    async def validate_ticket(
        self,
        ticket_id: str,
        session: aiohttp.ClientSession | None = None,
    ) -> TicketStatus:
        """Look up one ticket, using the cache when the entry is fresh.

        Args:
            ticket_id: Ticket reference as written in the comment
            session: Optional session to reuse; one is opened otherwise

        Returns:
            TicketStatus; transport failures are reported as `unreachable`
        """
        cached = self._cached(ticket_id)
        if cached is not None:
            logger.debug(f"Cache hit for {self.cache_key(ticket_id)}")
            return cached

        try:
            if session is None:
                async with self.open_session() as own_session:
                    status = await self._validate(own_session, ticket_id)
            else:
                status = await self._validate(session, ticket_id)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"{self.tracker_name} lookup for {ticket_id} failed: {e!r}")
            status = TicketStatus.failure(UNREACHABLE, message=str(e) or type(e).__name__)

        # Errors are not cached so the next run retries them
        if status.ok:
            self._cache[self.cache_key(ticket_id)] = (self._clock(), status)
        return status

    async def validate_tickets(self, ticket_ids: Iterable[str]) -> dict[str, TicketStatus]:
        """Validate distinct tickets concurrently over one session.

        A lookup that raises is isolated and reported as `unreachable`;
        it never affects the other tickets.
        """
        ids = list(dict.fromkeys(ticket_ids))
        if not ids:
            return {}

        async with self.open_session() as session:
            outcomes = await asyncio.gather(
                *(self.validate_ticket(ticket_id, session) for ticket_id in ids),
                return_exceptions=True,
            )

        results: dict[str, TicketStatus] = {}
        for ticket_id, outcome in zip(ids, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.warning(f"Validation of {ticket_id} raised {outcome!r}")
                outcome = TicketStatus.failure(UNREACHABLE, message=str(outcome))
            results[ticket_id] = outcome
        return results

    async def _request(
        self,
        session: aiohttp.ClientSession,
        method: str,
        url: str,
        headers: Mapping[str, str] | None = None,
        json: Any = None,
    ) -> HttpResponse:
        async with session.request(method, url, headers=headers, json=json) as response:
            try:
                data = await response.json(content_type=None)
            except ValueError:
                data = None
            return HttpResponse(status=response.status, data=data, headers=response.headers)

    @abstractmethod
    async def _validate(self, session: aiohttp.ClientSession, ticket_id: str) -> TicketStatus:
        """Query the tracker for one ticket."""
