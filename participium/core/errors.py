"""
Error kinds raised by the lifecycle engine.

Every error carries a human-readable message plus a structured ``details``
dict (report id, current/requested state, actor, office) so the calling
layer can render a precise message or map it onto a response code.
Nothing here is retried internally; see ``services.retry`` for the
caller-side conflict retry.
"""

from typing import Any, Dict, Optional


class LifecycleError(Exception):
    """Base class for all engine errors."""

    code = "LIFECYCLE_ERROR"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = {k: v for k, v in details.items() if v is not None}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": dict(self.details)}

    def __str__(self) -> str:
        return self.message


class NotFound(LifecycleError):
    """Report, officer or office absent."""

    code = "NOT_FOUND"


class ValidationError(LifecycleError):
    """Missing or malformed input (rejection reason, author type, content)."""

    code = "VALIDATION_ERROR"


class InvalidTransition(LifecycleError):
    """Status change not permitted from the current state."""

    code = "INVALID_TRANSITION"

    def __init__(
        self,
        current: str,
        requested: Optional[str],
        report_id: Optional[int] = None,
        message: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(
            message or f"Invalid status transition: {current} → {requested}",
            report_id=report_id,
            current=current,
            requested=requested,
            operation=operation,
        )
        self.current = current
        self.requested = requested


class Forbidden(LifecycleError):
    """Actor is not authorised for the operation."""

    code = "FORBIDDEN"


class ConfigurationError(LifecycleError):
    """Deployment data is inconsistent, e.g. an office without officers."""

    code = "CONFIGURATION_ERROR"


class ConflictError(LifecycleError):
    """The report changed between read and write; retry from scratch."""

    code = "CONFLICT"


class EventDeliveryError(LifecycleError):
    """
    The write was stored but the event sink failed.

    ``committed`` holds the stored report or comment. Retrying the
    operation would run against the new state, so callers should only
    re-deliver the event.
    """

    code = "EVENT_DELIVERY_FAILED"

    def __init__(self, message: str, committed: Any = None, **details: Any):
        super().__init__(message, **details)
        self.committed = committed
