"""Error Hierarchy — typed, categorized exceptions for all PixelCanvas failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces REST envelope; to_ws_event() produces realtime error message
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with PixelCanvasError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
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
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    project_id: int | None = None
    user_id: int | None = None
    event_type: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class PixelCanvasError(Exception):
    """Base exception for all PixelCanvas errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "project_id": self.context.project_id,
                    "event_type": self.context.event_type,
                },
            }
        }

    def to_ws_event(self) -> dict:
        """Convert to realtime error message sent back to the originating connection."""
        return {
            "type": "error",
            "data": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "severity": self.severity.value,
                "recoverable": self.severity in (
                    ErrorSeverity.INFO, ErrorSeverity.WARNING, ErrorSeverity.ERROR,
                ),
                "event_type": self.context.event_type,
            },
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidTimerError(PixelCanvasError):
    """Timer selector is not one of the known durations (strict mode only)."""
    def __init__(self, value: str, context: ErrorContext | None = None):
        super().__init__(
            f"Unknown timer selector '{value}'",
            "INVALID_TIMER", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.value = value


class GridValidationError(PixelCanvasError):
    """Pixel coordinates fall outside the project's grid."""
    def __init__(self, x: int, y: int, context: ErrorContext | None = None):
        super().__init__(
            f"Pixel ({x}, {y}) is outside the grid",
            "PIXEL_OUT_OF_BOUNDS", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.x = x
        self.y = y


class LifecycleError(PixelCanvasError):
    """Requested lifecycle transition is not allowed from the current state."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


class DuplicateFlagError(PixelCanvasError):
    """The (project, user) flag pair is already recorded."""
    def __init__(self, project_id: int, user_id: int, context: ErrorContext | None = None):
        super().__init__(
            "Flag already exists",
            "FLAG_ALREADY_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.project_id = project_id
        self.user_id = user_id


class ResourceNotFoundError(PixelCanvasError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class AuthenticationError(PixelCanvasError):
    """Bearer token missing, malformed, expired or signed with the wrong key."""
    def __init__(self, message: str = "Invalid token", context: ErrorContext | None = None):
        super().__init__(
            message, "AUTHENTICATION_FAILED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.ERROR, context, 401,
        )


class PermissionDeniedError(PixelCanvasError):
    """Actor holds no Permission Grant for the project."""
    def __init__(self, project_id: int, context: ErrorContext | None = None):
        super().__init__(
            f"No permission for project '{project_id}'",
            "PERMISSION_DENIED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.ERROR, context, 403,
        )
        self.project_id = project_id


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(PixelCanvasError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
