"""Typed failures raised by the ledger, the query service and the resilient executor."""


class AppError(Exception):
    """Base application error rendered as {status: "error", message} with status_code."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class UserNotFoundError(AppError):
    """Referenced user does not exist."""

    status_code = 404

    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message)


class InsufficientBalanceError(AppError):
    """Debit exceeds the user's current balance."""

    status_code = 400

    def __init__(self, message: str = "Insufficient balance") -> None:
        super().__init__(message)


class StoreError(AppError):
    """Database operation failed; details are logged, never returned to clients."""

    def __init__(self, message: str, attempts: int = 1) -> None:
        self.attempts = attempts
        super().__init__(message)


class NonRetryableStoreError(StoreError):
    """Constraint violation, bad reference or malformed value: surfaced on first occurrence."""


class TransientStoreError(StoreError):
    """Connection, timeout or deadlock failure that persisted through every retry."""
