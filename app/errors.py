"""
Error taxonomy for workspace orchestration.

Components raise these and let them propagate; only the orchestration
facade converts them into display text.
"""

from typing import Optional


class TeamspaceError(Exception):
    """Base class for all orchestration failures."""


class PreconditionFailed(TeamspaceError, ValueError):
    """A required field was missing or empty. Raised before any remote call."""


class NotInitialized(TeamspaceError):
    """No client, team or channel context has been established yet."""


class RemoteCallFailed(TeamspaceError):
    """The remote API rejected a call or could not be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


class RemoteNotFound(RemoteCallFailed):
    """The addressed remote resource does not exist (404)."""


class RemotePermissionDenied(RemoteCallFailed):
    """The bearer token is invalid, expired or lacks a scope (401/403)."""


class RemoteRateLimited(RemoteCallFailed):
    """The platform throttled the call (429)."""

    def __init__(self, message: str, retry_after: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ProvisioningFailed(TeamspaceError):
    """A team could not be created, adopted or fetched."""


class AttachmentError(TeamspaceError):
    """An attachment file could not be read or encoded."""
