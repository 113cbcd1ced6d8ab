# services/laundry-service/src/apps/core/services/exceptions.py
"""
Laundry Service Exceptions

Typed errors raised by the orchestrator services. The API layer maps each
onto an HTTP status.
"""

from typing import Optional, Dict, Any


class OrchestratorError(Exception):
    """Base exception for orchestrator errors."""

    def __init__(
        self,
        message: str,
        code: str = "ORCHESTRATOR_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(OrchestratorError):
    """Raised when input is malformed."""

    def __init__(
        self,
        message: str,
        field: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details=error_details
        )


class ConflictError(OrchestratorError):
    """Raised when the request clashes with current state."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, code=code, details=details)


class SlotTakenError(ConflictError):
    """Raised when the requested window is already held by another booking."""

    def __init__(
        self,
        message: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        error_details.setdefault("action_required", "JOIN_WAITLIST")
        super().__init__(
            message=message or "This slot was just taken by someone else. Join the waitlist?",
            code="SLOT_TAKEN",
            details=error_details
        )


class ResourceUnavailableError(ConflictError):
    """Raised when booking a resource that is under maintenance."""

    def __init__(
        self,
        resource_id: str,
        reason: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        error_details.update({
            "resource_id": resource_id,
            "maintenance_reason": reason,
        })
        super().__init__(
            message="This machine is under maintenance and cannot be booked.",
            code="RESOURCE_UNDER_MAINTENANCE",
            details=error_details
        )


class AuthorizationError(OrchestratorError):
    """Raised when the caller may not act on the target."""

    def __init__(
        self,
        operation: str,
        user_id: str = None,
        message: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        msg = message or f"Permission denied for operation: {operation}"
        error_details = details or {}
        error_details["operation"] = operation
        if user_id:
            error_details["user_id"] = user_id
        super().__init__(
            message=msg,
            code="FORBIDDEN",
            details=error_details
        )


class NotFoundError(OrchestratorError):
    """Raised when a resource, booking or waitlist entry does not exist."""

    def __init__(
        self,
        entity: str,
        entity_id: str = None,
        message: str = None
    ):
        super().__init__(
            message=message or f"{entity} not found: {entity_id}",
            code="NOT_FOUND",
            details={"entity": entity, "id": str(entity_id) if entity_id else None}
        )
