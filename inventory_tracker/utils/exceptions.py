"""Custom exception classes for the application."""


class BaseAppException(Exception):
    """Base exception class for all application exceptions."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(BaseAppException):
    """Raised when an item field holds an invalid value."""

    def __init__(self, message: str, field: str = None, details: dict = None):
        details = dict(details or {})
        if field:
            details["field"] = field
        self.field = field
        super().__init__(message, details)


class DecodeError(BaseAppException):
    """Base class for errors decoding a persisted record."""
    pass


class MalformedRecordError(DecodeError):
    """Raised when a record does not split into the expected fields."""
    pass


class InvalidFieldError(DecodeError):
    """Raised when a single field of a record cannot be parsed."""

    def __init__(self, field_name: str, raw_value: str, reason: str = None):
        self.field_name = field_name
        self.raw_value = raw_value
        message = f"Invalid value for {field_name}: {raw_value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, {"field": field_name, "raw_value": raw_value})


class StorageError(BaseAppException):
    """Raised when the backing file cannot be read or written."""
    pass


class ConfigurationError(BaseAppException):
    """Raised when there's a configuration error."""
    pass
