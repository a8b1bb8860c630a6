"""Custom exception classes for the application."""


class BaseAppException(Exception):
    """Base exception class for all application exceptions."""

    status_code = 400

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(BaseAppException):
    """Raised when a required field is missing or malformed."""
    pass


class NotFoundError(BaseAppException):
    """Raised when a referenced record does not exist."""
    status_code = 404


class InvalidOperationError(BaseAppException):
    """Raised when an operation is not allowed on the record's current state."""
    pass


class InsufficientStockError(BaseAppException):
    """Raised when a sale requests more units than are on hand."""

    def __init__(self, available: int, requested: int):
        super().__init__(
            f"Not enough stock. Available: {available}, Requested: {requested}",
            details={"available": available, "requested": requested}
        )
        self.available = available
        self.requested = requested


class AuthenticationError(BaseAppException):
    """Raised when authentication fails."""
    status_code = 401


class ConfigurationError(BaseAppException):
    """Raised when there's a configuration error."""
    status_code = 500


class ReportGenerationError(BaseAppException):
    """Raised when a report fails for an unexpected reason."""
    status_code = 500
