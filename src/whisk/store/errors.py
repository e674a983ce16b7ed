"""Record store errors."""


class StoreError(Exception):
    """Base exception for record store operations."""


class StorageReadError(StoreError):
    """Raised when the backing document cannot be read or written."""


class StorageFormatError(StoreError):
    """Raised when the backing document is not a valid list of projects."""


class IndexOutOfRange(StoreError):
    """Raised when a position does not address an existing project."""

    def __init__(self, index: int, length: int) -> None:
        self.index = index
        self.length = length
        super().__init__(f"Project index {index} is out of range for {length} project(s)")
