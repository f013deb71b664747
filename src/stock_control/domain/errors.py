"""Errors raised by the capture engine and the label pipeline."""

from enum import Enum


class StockControlError(Exception):
    """Base class for all stock control errors."""


class StepNotReady(StockControlError):
    """The current step's gate does not pass yet."""

    def __init__(self, step: object, reason: str) -> None:
        super().__init__(reason)
        self.step = step
        self.reason = reason


class InvalidFormat(StockControlError):
    """An identifier does not match its fixed format."""

    def __init__(self, field: str, value: str) -> None:
        super().__init__(f"Invalid {field} format: {value!r}")
        self.field = field
        self.value = value


class FileTooLarge(StockControlError):
    """A photo exceeds the size ceiling."""

    def __init__(self, path: str, size_bytes: int, limit: int) -> None:
        super().__init__(
            f"Photo {path} is {size_bytes} bytes; the limit is {limit} bytes"
        )
        self.path = path
        self.size_bytes = size_bytes
        self.limit = limit


class PhotoMissing(StockControlError):
    """A photo file does not exist on disk."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Photo file not found: {path}")
        self.path = path


class DuplicatePhoto(StockControlError):
    """A photo with the same path is already attached."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Photo already attached: {path}")
        self.path = path


class LabelCountOutOfRange(StockControlError):
    """A label count is outside the bound for its kind."""

    def __init__(self, kind: object, count: int, minimum: int, maximum: int) -> None:
        super().__init__(f"Label count must be between {minimum} and {maximum}")
        self.kind = kind
        self.count = count
        self.minimum = minimum
        self.maximum = maximum


class PrinterUnavailable(StockControlError):
    """The label printer could not be reached before a batch started."""


class ErrorCategory(str, Enum):
    """Categories for failures reported by the remote backend."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    SESSION_EXPIRED = "session_expired"
    TRANSIENT = "transient"
    MALFORMED_RESPONSE = "malformed_response"


class RemoteError(StockControlError):
    """A categorized failure from the remote backend."""

    def __init__(
        self,
        category: ErrorCategory,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.message = message
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        """Only transient failures are worth re-invoking."""
        return self.category is ErrorCategory.TRANSIENT
