"""Custom exceptions for the expense tracker application."""


class ExpenseTrackerException(Exception):
    """Base exception for all expense tracker errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(ExpenseTrackerException):
    """Raised when input validation fails."""


class NotFoundError(ExpenseTrackerException):
    """Raised when an expense is not found."""

    def __init__(self, message: str = "Expense not found"):
        super().__init__(message)


class ConflictError(ExpenseTrackerException):
    """Raised when there's a conflict (e.g., duplicate expense id)."""

    def __init__(self, message: str = "Expense conflict"):
        super().__init__(message)


class StorageError(ExpenseTrackerException):
    """Raised when storage operations fail in strict mode."""

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message)
