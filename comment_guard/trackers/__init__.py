"""
Asynchronous issue-tracker clients.

`create_client` picks the client for the configured tracker and fails
fast, with TrackerConfigurationError, when a required setting is absent.
"""

from collections.abc import Mapping
from typing import Any

from .base import (
    AUTH_FAILED,
    INVALID_FORMAT,
    MISSING_CONFIG,
    RATE_LIMITED,
    UNREACHABLE,
    HttpResponse,
    IssueTrackerClient,
    TicketStatus,
    TrackerConfigurationError,
    TrackerSettings,
    resolve_token,
)
from .custom import CustomClient
from .github import GitHubClient
from .gitlab import GitLabClient
from .jira import JiraClient
from .linear import LinearClient

CLIENT_TYPES: dict[str, type[IssueTrackerClient]] = {
    "github": GitHubClient,
    "jira": JiraClient,
    "gitlab": GitLabClient,
    "linear": LinearClient,
    "custom": CustomClient,
}


def create_client(
    settings: TrackerSettings | Mapping[str, Any],
    **kwargs,
) -> IssueTrackerClient:
    """Build the client for `settings.tracker`.

    Args:
        settings: TrackerSettings, or a mapping validated into one
        **kwargs: Passed through to the client constructor

    Returns:
        The configured IssueTrackerClient

    Raises:
        TrackerConfigurationError: Unknown tracker or missing required setting
    """
    if not isinstance(settings, TrackerSettings):
        settings = TrackerSettings.model_validate(dict(settings))

    client_type = CLIENT_TYPES.get((settings.tracker or "").lower())
    if client_type is None:
        raise TrackerConfigurationError(
            "tracker", f"Unknown issue tracker: {settings.tracker!r}"
        )
    return client_type(settings, **kwargs)


__all__ = [
    "AUTH_FAILED",
    "CLIENT_TYPES",
    "INVALID_FORMAT",
    "MISSING_CONFIG",
    "RATE_LIMITED",
    "UNREACHABLE",
    "CustomClient",
    "GitHubClient",
    "GitLabClient",
    "HttpResponse",
    "IssueTrackerClient",
    "JiraClient",
    "LinearClient",
    "TicketStatus",
    "TrackerConfigurationError",
    "TrackerSettings",
    "create_client",
]
