"""
OM Spiritual Backend - Custom Exception Hierarchy
==================================================

What:  Application-specific exceptions, one per failure class the API reports.
How:   Each exception carries a user-safe message and an optional context dict.
       Global handlers (registered in main.py) turn them into JSON responses.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    OmSpiritualError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── PermissionDeniedError    → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── ConfigurationError       → 500 Internal Server Error
    ├── DatabaseError            → 500 Internal Server Error
    ├── PaymentServiceError      → 502 Bad Gateway
    ├── LLMServiceError          → never reaches HTTP (recommendation fallback)
    └── CircuitBreakerOpenError  → never reaches HTTP (recommendation fallback)

`context` is logged server-side only and never copied into a response unless
the handler does so explicitly.
"""

from typing import Any, Dict, Optional


class OmSpiritualError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, not returned by default)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(OmSpiritualError):
    """
    Raised when client input fails a business rule or cannot be parsed.

    HTTP:    400 Bad Request
    When:    Invalid webhook signature, malformed webhook body, bad field values.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(OmSpiritualError):
    """
    Missing, malformed, expired or forged token, or bad login credentials.

    HTTP:    401 Unauthorized
    The `reason` (e.g. "expired", "bad_signature") distinguishes causes in
    logs; every cause produces the same external response.
    """

    def __init__(
        self,
        message: str = "Unauthorized",
        reason: str = "unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason
        super().__init__(message=message, context=ctx)
        self.reason = reason


class PermissionDeniedError(OmSpiritualError):
    """
    Authenticated, but not allowed (wrong role or disabled account).

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Forbidden",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(OmSpiritualError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(OmSpiritualError):
    """
    The request collides with existing state (duplicate signup email).

    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(OmSpiritualError):
    """
    A required setting is missing for this endpoint.

    HTTP:    500 Internal Server Error
    Scope:   Fatal for the affected endpoint only (e.g. webhook without a
             shared secret); the rest of the API keeps serving.
    """

    def __init__(
        self,
        message: str = "Server is not configured for this operation",
        setting: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if setting:
            ctx["setting"] = setting
        super().__init__(message=message, context=ctx)
        self.setting = setting


class DatabaseError(OmSpiritualError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error
    The client always gets a generic message; details (constraint names,
    query text) stay in the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PaymentServiceError(OmSpiritualError):
    """
    The payment processor rejected the call, timed out or was unreachable.

    HTTP:    502 Bad Gateway
    Only raised when PAYMENTS_LIVE_MODE is enabled.
    """

    def __init__(
        self,
        message: str = "Payment provider is unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class LLMServiceError(OmSpiritualError):
    """
    Raised when the Gemini call fails after all retries or returns an
    unusable response.

    Never surfaced over HTTP: RecommendationService catches it and returns
    the static fallback recommendation.
    """

    def __init__(
        self,
        message: str = "AI recommendation service is temporarily unavailable",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class CircuitBreakerOpenError(OmSpiritualError):
    """
    Raised when the Gemini circuit breaker is OPEN.

    How circuit breaker works:
        CLOSED (normal) → failures increment counter
        → After N failures → OPEN (reject calls for M seconds)
        → After M seconds → HALF-OPEN (allow one test call)
        → Test succeeds → CLOSED; test fails → OPEN again

    Masked by RecommendationService like LLMServiceError.
    """

    def __init__(
        self,
        recovery_time: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"AI service is temporarily unavailable due to repeated failures. "
            f"Retrying in approximately {recovery_time} seconds."
        )
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(message=message, context=ctx)
        self.recovery_time = recovery_time
