"""Error types raised by the journal storage layer."""


class UninitializedStoreError(RuntimeError):
    """Raised when the store is used before ensure_ready() has completed."""


class ConstraintViolationError(Exception):
    """Raised when a write hits the unique date key constraint."""

    def __init__(self, date_key: str, message: str | None = None):
        self.date_key = date_key
        super().__init__(message or f"Entry for {date_key} already exists")
