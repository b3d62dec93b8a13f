"""Exceptions raised by the document store."""


class StoreError(Exception):
    """Base exception for document store errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class StoreConnectionError(StoreError):
    """Raised when the database cannot be reached or initialized."""

    pass


class PersistenceError(StoreError):
    """Raised when a write batch fails; nothing from the batch is committed."""

    def __init__(self, message: str, batch_size: int = 0, *args, **kwargs):
        self.batch_size = batch_size
        super().__init__(message, *args, **kwargs)
