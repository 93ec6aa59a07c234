from typing import Any, Union

from storage.exceptions import StorageConfigurationError
from storage.providers.database import DatabaseStore
from storage.providers.memory import MemoryStore

Store = Union[DatabaseStore, MemoryStore]


class StoreFactory:
    """
    Builds the account/session store named by the STORAGE_BACKEND setting.
    """

    _providers: dict[str, type] = {
        "memory": MemoryStore,
        "database": DatabaseStore,
    }

    @classmethod
    def create_store(cls, backend: str) -> Store:
        """
        Raises:
            StorageConfigurationError: If the backend is not supported
        """
        if backend not in cls._providers:
            raise StorageConfigurationError(f"Unsupported storage backend: {backend}")
        return cls._providers[backend]()

    @classmethod
    def from_config(cls, config: Any) -> Store:
        return cls.create_store(config.get("STORAGE_BACKEND", "database"))
