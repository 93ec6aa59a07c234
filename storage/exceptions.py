class StorageError(Exception):
    """Base exception for account/session store operations."""

    def __init__(self, message: str = "Storage operation failed") -> None:
        super().__init__(message)
        self.message = message


class DuplicateRecordError(StorageError):
    """Raised when a unique field (email, username) is already taken."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Duplicate value for {field}")
        self.field = field


class StorageConfigurationError(StorageError):
    """Raised when the configured storage backend is unknown."""

    def __init__(self, message: str = "Invalid storage configuration") -> None:
        super().__init__(message)
