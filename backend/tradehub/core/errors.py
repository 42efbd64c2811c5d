"""Error Hierarchy: typed, categorized exceptions for every trade-pipeline failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Every error carries structured data (dict) next to its human message
    - Domain errors (4xx) are actionable by the caller; infrastructure errors (5xx) are "try again later"
    - to_response() produces the REST envelope; no internal details leaked in messages

Design Decisions:
    - Single hierarchy with TradeHubError base: the FastAPI global handler catches all
    - ErrorContext as dataclass: observability fields without coupling to the logging framework
    - SelfOfferError / ListingNotActiveError subclass the generic kinds so callers can
      match either the specific or the general failure
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    pipeline: str | None = None
    user_id: str | None = None
    debug_info: dict[str, Any] | None = None


class TradeHubError(Exception):
    """Base exception for all trade engine errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
        data: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status
        self.data = data or {}

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "data": self.data,
                "context": {
                    "pipeline": self.context.pipeline,
                },
            }
        }


# ─── Caller Errors (400-level) ──────────────────────────────────

class AuthenticationRequiredError(TradeHubError):
    """No acting user in the pipeline context."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Authentication required",
            "AUTHENTICATION_REQUIRED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class InvalidInputError(TradeHubError):
    """Pipeline input failed schema validation."""
    def __init__(
        self, fields: list[str], details: list[dict] | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Invalid input: {', '.join(fields) or 'payload'}",
            "INVALID_INPUT", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
            data={"fields": fields, "details": details or []},
        )
        self.fields = fields


class NotFoundError(TradeHubError):
    """Referenced entity does not exist."""
    def __init__(
        self, resource_type: str, resource_id: object,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
            data={"resource_type": resource_type, "resource_id": str(resource_id)},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class NotAuthorizedError(TradeHubError):
    """Acting user is not the owner/participant the operation requires."""
    def __init__(
        self, message: str, code: str = "NOT_AUTHORIZED",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class SelfOfferError(NotAuthorizedError):
    """Listing owner attempted to make an offer on their own listing."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Cannot offer on your own listing", "SELF_OFFER", context,
        )


class InvalidTransitionError(TradeHubError):
    """Current status cannot legally reach the requested status."""
    def __init__(
        self,
        entity_kind: str,
        from_status: str,
        to_status: str,
        valid: list[str],
        message: str | None = None,
        code: str = "INVALID_TRANSITION",
        context: ErrorContext | None = None,
    ):
        if message is None:
            message = (
                f'Invalid {entity_kind} status transition: "{from_status}" -> "{to_status}". '
                + (
                    f'Valid transitions from "{from_status}": {", ".join(valid)}.'
                    if valid else
                    f'"{from_status}" is a terminal status, no further transitions allowed.'
                )
            )
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 409,
            data={
                "entity_kind": entity_kind,
                "from_status": from_status,
                "to_status": to_status,
                "valid_transitions": valid,
            },
        )
        self.entity_kind = entity_kind
        self.from_status = from_status
        self.to_status = to_status
        self.valid = valid


class ListingNotActiveError(InvalidTransitionError):
    """Offer attempted on a listing that no longer accepts offers."""
    def __init__(
        self,
        current_status: str,
        valid: list[str] | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            "listing", current_status, "active", valid or [],
            message=f"Listing is not active (current: {current_status})",
            code="LISTING_NOT_ACTIVE", context=context,
        )


class ProcedureRejectedError(TradeHubError):
    """Atomic procedure re-checked an invariant and refused to commit."""
    def __init__(
        self, procedure: str, reason: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Procedure {procedure} rejected: {reason}",
            "PROCEDURE_REJECTED", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
            data={"procedure": procedure, "reason": reason},
        )
        self.procedure = procedure
        self.reason = reason


# ─── Infrastructure Errors (500-level) ──────────────────────────

class MutationFailedError(TradeHubError):
    """The atomic backend call rejected or errored. Nothing was committed."""
    def __init__(
        self, pipeline: str, procedure: str, reason: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f'Pipeline "{pipeline}" mutation {procedure} failed: {reason}',
            "MUTATION_FAILED", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 502,
            data={"pipeline": pipeline, "procedure": procedure},
        )
        self.pipeline = pipeline
        self.procedure = procedure


class MalformedResultError(TradeHubError):
    """Backend returned a shape the engine could not validate (internal defect)."""
    def __init__(
        self, pipeline: str, fields: list[str], context: ErrorContext | None = None,
    ):
        super().__init__(
            f'Pipeline "{pipeline}" received a malformed mutation result',
            "MALFORMED_RESULT", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
            data={"pipeline": pipeline, "fields": fields},
        )
        self.pipeline = pipeline


class DatabaseError(TradeHubError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class PushDeliveryError(TradeHubError):
    """Push provider refused or failed a notification."""
    def __init__(self, status_code: int, detail: str, context: ErrorContext | None = None):
        super().__init__(
            f"Push notification failed: {status_code}",
            "PUSH_DELIVERY_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.WARNING, context, 502,
            data={"status_code": status_code, "detail": detail},
        )
        self.status_code = status_code
