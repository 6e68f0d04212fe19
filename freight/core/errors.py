"""Single error type raised by every core operation.

Routers never build ``HTTPException`` for domain failures; they let
``FreightError`` propagate and the handler registered in ``freight.main``
renders it with the status mapped from its kind.
"""
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    EXTERNAL_SERVICE_UNAVAILABLE = "external_service_unavailable"
    INTERNAL = "internal"

    def __str__(self):
        return self.value


STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.EXTERNAL_SERVICE_UNAVAILABLE: 503,
    ErrorKind.INTERNAL: 500,
}

DEFAULT_MESSAGES = {
    ErrorKind.INVALID_INPUT: "Invalid request.",
    ErrorKind.UNAUTHORIZED: "Authentication required.",
    ErrorKind.FORBIDDEN: "Access denied.",
    ErrorKind.NOT_FOUND: "Resource not found.",
    ErrorKind.CONFLICT: "Request conflicts with the current state.",
    ErrorKind.RATE_LIMITED: "Rate limit exceeded",
    ErrorKind.EXTERNAL_SERVICE_UNAVAILABLE: "External service is unavailable.",
    ErrorKind.INTERNAL: "Internal server error.",
}


class FreightError(Exception):

    def __init__(self, kind: ErrorKind, message: Optional[str] = None):
        self.kind = kind
        self.message = message or DEFAULT_MESSAGES[kind]
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def to_dict(self) -> dict:
        return {
            "success": False,
            "status": self.status_code,
            "kind": str(self.kind),
            "message": self.message,
        }

    def __repr__(self):
        return f"FreightError({self.kind.value!r}, {self.message!r})"


def invalid_input(message: Optional[str] = None) -> FreightError:
    return FreightError(ErrorKind.INVALID_INPUT, message)


def forbidden(message: Optional[str] = None) -> FreightError:
    return FreightError(ErrorKind.FORBIDDEN, message)


def not_found(message: Optional[str] = None) -> FreightError:
    return FreightError(ErrorKind.NOT_FOUND, message)


def conflict(message: Optional[str] = None) -> FreightError:
    return FreightError(ErrorKind.CONFLICT, message)


def unavailable(message: Optional[str] = None) -> FreightError:
    return FreightError(ErrorKind.EXTERNAL_SERVICE_UNAVAILABLE, message)
