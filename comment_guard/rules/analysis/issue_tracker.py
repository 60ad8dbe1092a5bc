"""
Issue tracker integration rule.

Collects ticket references from TODO/FIXME comments while the file is
traversed, then validates each distinct ticket once against the
configured tracker when traversal ends. Every comment naming a ticket
gets that ticket's verdict; lookup failures are reported on the first
comment that named the ticket.
"""

import logging
import re
import threading
from collections.abc import Callable

from pydantic import ConfigDict, field_validator

from ...analysis.source import Comment
from ...trackers import (
    AUTH_FAILED,
    MISSING_CONFIG,
    RATE_LIMITED,
    UNREACHABLE,
    IssueTrackerClient,
    TicketStatus,
    TrackerConfigurationError,
    TrackerSettings,
    create_client,
)
from ..base import BaseRule, RuleConfigurationError, RuleContext, RuleOptions, Visitor
from ..patterns import compile_pattern

logger = logging.getLogger(__name__)

ACTION_COMMENT = re.compile(r"\b(TODO|FIXME)\b", re.IGNORECASE)
DEFAULT_TICKET_PATTERN = r"[A-Z]+-\d+|#\d+|GH-\d+"

ClientFactory = Callable[[TrackerSettings], IssueTrackerClient]


class IssueTrackerOptions(RuleOptions, TrackerSettings):
    """Options for issue-tracker-integration: tracker settings plus reporting switches."""

    model_config = ConfigDict(extra="forbid")

    ticket_pattern: str = DEFAULT_TICKET_PATTERN
    allow_closed: bool = True
    warn_on_closed: bool = True
    offline: bool = False

    @field_validator("ticket_pattern")
    @classmethod
    def _check_pattern(cls, value: str) -> str:
        return compile_pattern(value)


class IssueTrackerRule(BaseRule):
    """Validate ticket references in TODO/FIXME comments against a tracker."""

    Options = IssueTrackerOptions

    messages = {
        "invalidTicket": "Ticket '{{ticketId}}' does not exist in {{tracker}}.",
        "closedTicket": "Ticket '{{ticketId}}' is closed. Consider removing this TODO/FIXME.",
        "unreachableTracker": (
            "Could not reach {{tracker}} to validate '{{ticketId}}'. Check configuration."
        ),
        "missingConfig": "Issue tracker validation enabled but '{{field}}' is not configured.",
        "authFailed": "Authentication failed for {{tracker}}. Check token configuration.",
        "rateLimited": "Rate limited by {{tracker}}. Ticket '{{ticketId}}' validation skipped.",
    }

    def __init__(self, client_factory: ClientFactory | None = None):
        self.client_factory = client_factory or create_client
        # Clients are kept across files so their ticket caches are shared
        self._clients: dict[str, IssueTrackerClient] = {}
        self._lock = threading.Lock()

    @property
    def rule_id(self) -> str:
        return "issue-tracker-integration"

    @property
    def name(self) -> str:
        return "Issue Tracker Integration"

    @property
    def category(self) -> str:
        return "analysis"

    @property
    def description(self) -> str:
        return "Validate ticket references in TODO/FIXME comments against an issue tracker"

    def _client_for(self, options: IssueTrackerOptions) -> IssueTrackerClient:
        key = options.model_dump_json()
        with self._lock:
            client = self._clients.get(key)
            if client is None:
                client = self.client_factory(options)
                self._clients[key] = client
            return client

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: IssueTrackerOptions = context.options
        if options.offline or not options.tracker:
            return {}

        try:
            client = self._client_for(options)
        except TrackerConfigurationError as e:
            raise RuleConfigurationError("missingConfig", {"field": e.field}) from e

        pattern = re.compile(options.ticket_pattern, re.IGNORECASE)
        tickets: dict[str, list[Comment]] = {}

        def collect_tickets(_node) -> None:
            for comment in context.comments:
                if not ACTION_COMMENT.search(comment.value):
                    continue
                for match in pattern.finditer(comment.value):
                    if match[0]:
                        tickets.setdefault(match[0], []).append(comment)

        def report_failure(ticket_id: str, comment: Comment, result: TicketStatus) -> None:
            data = {"tracker": options.tracker, "ticketId": ticket_id}
            if result.error == MISSING_CONFIG:
                context.report("missingConfig", comment, data={"field": result.field or ""})
            elif result.error == AUTH_FAILED:
                context.report("authFailed", comment, data=data)
            elif result.error == RATE_LIMITED:
                context.report("rateLimited", comment, data=data)
            elif result.error == UNREACHABLE:
                context.report("unreachableTracker", comment, data=data)
            else:
                logger.debug(f"Skipping {ticket_id}: {result.error}")

        def report(ticket_id: str, comments: list[Comment], result: TicketStatus) -> None:
            if not result.ok:
                report_failure(ticket_id, comments[0], result)
                return

            if not result.exists:
                for comment in comments:
                    context.report(
                        "invalidTicket",
                        comment,
                        data={"ticketId": ticket_id, "tracker": options.tracker},
                    )
                return

            if result.closed and (not options.allow_closed or options.warn_on_closed):
                for comment in comments:
                    context.report("closedTicket", comment, data={"ticketId": ticket_id})

        async def validate_tickets(_node) -> None:
            if not tickets:
                return
            logger.debug(f"Validating {len(tickets)} ticket(s) with {options.tracker}")
            results = await client.validate_tickets(tickets)
            for ticket_id, comments in tickets.items():
                report(ticket_id, comments, results[ticket_id])

        return {"program": collect_tickets, "program:exit": validate_tickets}
