"""Exception hierarchy for SocialAuth.

Every error raised to callers derives from ``SocialAuthError`` and carries
the endpoint it concerns (credentials redacted) and, where one was received,
the HTTP status code.

Error codes follow pattern: [CATEGORY][NUMBER]
- INP: Caller input errors (001-099)
- AUT: Authentication/session errors (100-199)
- NET: Provider communication errors (200-299)
- DAT: Response data errors (300-399)
- PLG: Plugin errors (400-499)
- PRV: Provider capability errors (500-599)
"""

from __future__ import annotations

from typing import Any

from socialauth.core.logger import redact_url


class SocialAuthError(Exception):
    """Base exception for all SocialAuth errors."""

    def __init__(
        self,
        message: str,
        code: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        """Initialize exception with message and diagnostic metadata.

        Args:
            message: Human readable error message
            code: Unique error code (e.g., "AUT100")
            endpoint: URL of the endpoint involved, if any
            status_code: HTTP status code returned by the provider, if any
            details: Optional additional context
        """
        self.message = message
        self.code = code
        self.endpoint = redact_url(endpoint) if endpoint else None
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self._compose())

    def _compose(self) -> str:
        text = self.message
        if self.endpoint:
            text = f"{text} [endpoint={self.endpoint}]"
        if self.status_code is not None:
            text = f"{text} [status={self.status_code}]"
        return text

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serializable error payload."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "endpoint": self.endpoint,
                "status_code": self.status_code,
                "details": self.details,
            }
        }


# ============================================================================
# INPUT ERRORS (INP001-099)
# ============================================================================

class InvalidInputError(SocialAuthError):
    """Caller-supplied data violates a precondition."""

    def __init__(self, message: str, endpoint: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message=message, code="INP001", endpoint=endpoint, details=details)


# ============================================================================
# AUTHENTICATION ERRORS (AUT100-199)
# ============================================================================

class NotAuthenticatedError(SocialAuthError):
    """Operation requires an access grant and none is present."""

    def __init__(self, endpoint: str | None = None):
        super().__init__(
            message="Not authenticated: complete the login flow or restore an access grant first",
            code="AUT100",
            endpoint=endpoint,
        )


class StateMismatchError(SocialAuthError):
    """Callback state parameter does not match the one issued for this session."""

    def __init__(self, endpoint: str | None = None):
        super().__init__(
            message="State parameter value does not match with expected value",
            code="AUT101",
            endpoint=endpoint,
        )


class InvalidGrantError(SocialAuthError):
    """Supplied access grant does not have the shape this strategy expects."""

    def __init__(self, reason: str, provider_id: str | None = None):
        super().__init__(
            message=f"Invalid access grant: {reason}",
            code="AUT102",
            details={"provider_id": provider_id} if provider_id else {},
        )


# ============================================================================
# PROVIDER COMMUNICATION ERRORS (NET200-299)
# ============================================================================

class ProviderCommunicationError(SocialAuthError):
    """Base class for failures talking to the identity provider."""
    pass


class ExchangeFailedError(ProviderCommunicationError):
    """Authorization callback could not be exchanged for an access grant."""

    def __init__(
        self,
        message: str = "Token exchange failed",
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code="NET200",
            endpoint=endpoint,
            status_code=status_code,
            details=details,
        )


class TransportError(ProviderCommunicationError):
    """Network or protocol level failure performing an HTTP request."""

    def __init__(self, message: str, endpoint: str | None = None):
        super().__init__(message=message, code="NET201", endpoint=endpoint)


class FetchFailedError(ProviderCommunicationError):
    """Provider endpoint could not be reached or answered with an error status."""

    def __init__(self, message: str, endpoint: str | None = None, status_code: int | None = None):
        super().__init__(message=message, code="NET202", endpoint=endpoint, status_code=status_code)


# ============================================================================
# RESPONSE DATA ERRORS (DAT300-399)
# ============================================================================

class MalformedResponseError(SocialAuthError):
    """Provider response could not be parsed into the expected shape."""

    def __init__(self, message: str, endpoint: str | None = None, status_code: int | None = None):
        super().__init__(message=message, code="DAT300", endpoint=endpoint, status_code=status_code)


# ============================================================================
# PLUGIN ERRORS (PLG400-499)
# ============================================================================

class PluginUnavailableError(SocialAuthError):
    """Plugin identifier could not be resolved to a working plugin."""

    def __init__(self, identifier: str, reason: str = "no plugin registered under this identifier"):
        super().__init__(
            message=f"Plugin '{identifier}' unavailable: {reason}",
            code="PLG400",
            details={"identifier": identifier},
        )
        self.identifier = identifier


# ============================================================================
# PROVIDER CAPABILITY ERRORS (PRV500-599)
# ============================================================================

class UnsupportedOperationError(SocialAuthError):
    """Provider does not implement the requested operation."""

    def __init__(self, operation: str, provider_id: str):
        super().__init__(
            message=f"{operation} is not implemented for {provider_id}",
            code="PRV500",
            details={"operation": operation, "provider_id": provider_id},
        )
