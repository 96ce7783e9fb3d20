"""Custom exceptions and helpers for consistent failure results."""

from typing import Any, Dict


class AppError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, status_code=422)


class NotFoundError(AppError):
    """Raised when a requested customer is missing."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class WorkflowStateError(AppError):
    """Raised when an operation runs out of its workflow order."""

    def __init__(self, message: str = "Workflow step out of order"):
        super().__init__(message, status_code=409)


class BusinessRuleError(AppError):
    """Raised when well-formed input breaks a business rule."""

    def __init__(self, message: str = "Business rule violated"):
        super().__init__(message, status_code=422)


class TransactionLimitError(ValidationError, BusinessRuleError):
    """Raised when an amount is above the per-transaction ceiling."""

    def __init__(self, message: str = "Amount exceeds maximum limit"):
        AppError.__init__(self, message, status_code=422)


class InternalServiceError(AppError):
    """Raised for unexpected internal faults such as a corrupted record."""

    def __init__(self, message: str = "Internal error"):
        super().__init__(message, status_code=500)


def to_failure(error: AppError) -> Dict[str, Any]:
    """Convert an AppError into the uniform failure result."""
    return {"success": False, "error": str(error)}
