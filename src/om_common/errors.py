"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Identity
  4xxx: Order (client errors)
  9xxx: System
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: Any = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details
        super().__init__(message)


# --- 1xxx: Auth/Identity ---

class InvalidTokenError(AppError):
    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(1001, message, 401)


# --- 4xxx: Order ---

class ValidationError(AppError):
    """Malformed input: missing items, bad enum value, negative amounts."""

    def __init__(self, message: str) -> None:
        super().__init__(4001, message, 400)


class InvalidTransitionError(AppError):
    """Illegal order state transition."""

    def __init__(self, message: str) -> None:
        super().__init__(4002, message, 400)


# --- 9xxx: System ---

class PersistenceError(AppError):
    """Store failure. The underlying cause travels in ``details`` only."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        details = f"{type(cause).__name__}: {cause}" if cause is not None else None
        super().__init__(9001, message, 500, details)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
