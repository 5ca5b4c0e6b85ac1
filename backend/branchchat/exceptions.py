"""Custom exceptions for BranchChat.

Every error carries the HTTP status it maps to, a stable machine-readable
``code`` and a ``category`` the UI uses to pick a treatment (configuration
problem, transient upstream problem, missing entity).
"""

from typing import Optional


class BranchChatError(Exception):
    """Base class for all errors surfaced to API callers."""

    status_code = 500
    code = "internal_error"
    category = "internal"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class Unauthenticated(BranchChatError):
    """Raised when a request carries no usable user identity."""

    status_code = 401
    code = "unauthenticated"
    category = "caller"

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class InvalidMessage(BranchChatError):
    """Raised when a message to append has a role other than user or assistant."""

    status_code = 400
    code = "invalid_message"
    category = "caller"


class NotFound(BranchChatError):
    """Raised for missing entities and entities owned by another user."""

    status_code = 404
    code = "not_found"
    category = "not_found"


class NoCredential(BranchChatError):
    """Raised when the user has no active API key for a provider."""

    status_code = 400
    code = "no_credential"
    category = "configuration"

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"No API key found for provider: {provider}")


class UnsupportedProvider(BranchChatError):
    """Raised for provider identifiers missing from the registry."""

    status_code = 400
    code = "unsupported_provider"
    category = "configuration"

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"Unsupported provider: {provider}")


class UpstreamError(BranchChatError):
    """Raised when a provider API fails, times out or returns a malformed reply.

    ``status`` is None for transport failures (timeouts, refused connections).
    """

    status_code = 502
    code = "upstream_error"
    category = "transient"

    def __init__(self, provider: str, status: Optional[int], body: str):
        self.provider = provider
        self.status = status
        self.body = body
        if status is None:
            detail = body
        else:
            detail = f"API Error: {status} - {body}"
        super().__init__(f"Failed to get response from {provider}: {detail}")


class ConsistencyViolation(BranchChatError):
    """Raised when a write would break a log or branch invariant."""

    status_code = 500
    code = "consistency_violation"
    category = "internal"
