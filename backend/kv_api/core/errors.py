"""Error Hierarchy: typed, categorized exceptions for every KV API failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
      and the HTTP status it maps to
    - to_response() produces the flat JSON body clients already depend on
      ({"error": ...} plus "details" or "message" where applicable)
    - Store errors carry the driver message as details; unhandled errors never do

Design Decisions:
    - Single hierarchy with KVApiError base: one FastAPI handler catches all (ADR: uniform error shape)
    - StoreUnavailableError subclasses StoreOperationError: same 500 envelope,
      distinct code (STORE_UNAVAILABLE) in logs
"""

from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    ROUTING = "routing"
    STORE = "store"
    INTERNAL = "internal"


class KVApiError(Exception):
    """Base exception for all KV API errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the REST error body."""
        return {"error": self.message}


# ─── Request Errors (400-level) ─────────────────────────────────

SET_BODY_REQUIRED = 'Please provide both "key" and "value" in the JSON body.'


class ValidationError(KVApiError):
    """Required request field missing or falsy."""
    def __init__(self, message: str = SET_BODY_REQUIRED):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, 400,
        )


class KeyNotFoundError(KVApiError):
    """Key absent from the store. An expected outcome, not a failure."""
    def __init__(self, key: str):
        super().__init__(
            f'Key "{key}" not found.',
            "KEY_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.INFO, 404,
        )
        self.key = key


class RouteNotFoundError(KVApiError):
    """No route matches the request method and path."""
    def __init__(self, method: str, path: str):
        super().__init__(
            "Endpoint not found",
            "ROUTE_NOT_FOUND", ErrorCategory.ROUTING,
            ErrorSeverity.WARNING, 404,
        )
        self.method = method
        self.path = path

    def to_response(self) -> dict:
        return {
            "error": self.message,
            "message": f"Route {self.method} {self.path} does not exist",
        }


# ─── Store Errors (500-level) ───────────────────────────────────

_OPERATION_SUMMARIES = {
    "set": "Failed to set key in Redis",
    "get": "Failed to get key from Redis",
}


class StoreOperationError(KVApiError):
    """A store command failed."""
    def __init__(self, operation: str, details: str):
        super().__init__(
            _OPERATION_SUMMARIES.get(
                operation, f"Failed to {operation} in Redis",
            ),
            "STORE_OPERATION_ERROR", ErrorCategory.STORE,
            ErrorSeverity.ERROR, 500,
        )
        self.operation = operation
        self.details = details

    def to_response(self) -> dict:
        return {"error": self.message, "details": self.details}


class StoreUnavailableError(StoreOperationError):
    """The store connection is down or closed."""
    def __init__(self, operation: str, details: str):
        super().__init__(operation, details)
        self.code = "STORE_UNAVAILABLE"
        self.severity = ErrorSeverity.CRITICAL


# ─── Internal Errors ────────────────────────────────────────────

INTERNAL_ERROR_RESPONSE = {
    "error": "Internal server error",
    "message": "Something went wrong on our side. Please try again later.",
}


class InvalidTransitionError(KVApiError):
    """Connection lifecycle asked for a transition the state machine forbids."""
    def __init__(self, current: str, target: str):
        super().__init__(
            f"Illegal connection transition {current} -> {target}",
            "INVALID_TRANSITION", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, 500,
        )
        self.current = current
        self.target = target

    def to_response(self) -> dict:
        return dict(INTERNAL_ERROR_RESPONSE)
