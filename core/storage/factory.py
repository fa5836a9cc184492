"""
Storage factory for creating storage backend instances.

This module provides a factory function to create the appropriate
store implementation based on configuration.
"""

from enum import Enum
from typing import TYPE_CHECKING

from core.logging import get_logger
from core.storage.base import BaseStore


if TYPE_CHECKING:
    from core.config import Settings


logger = get_logger(__name__)


class StorageBackend(str, Enum):
    """Supported storage backends."""
    MONGODB = "mongodb"
    MEMORY = "memory"


def get_storage_backend(settings: "Settings") -> StorageBackend:
    """
    Determine which storage backend to use based on settings.

    Args:
        settings: Application settings

    Returns:
        The configured storage backend
    """
    backend_str = settings.storage_backend.lower()

    try:
        return StorageBackend(backend_str)
    except ValueError:
        raise ValueError(
            f"Unsupported storage backend: {backend_str}. "
            f"Supported backends: {[b.value for b in StorageBackend]}"
        )


def create_store(settings: "Settings") -> BaseStore:
    """
    Create a store instance based on settings.

    Args:
        settings: Application settings

    Returns:
        Configured store (not yet initialized, call setup())
    """
    backend = get_storage_backend(settings)

    if backend == StorageBackend.MONGODB:
        from core.storage.mongodb import MongoDBStore

        logger.info(
            "Creating MongoDB store",
            database=settings.mongodb_database,
        )
        return MongoDBStore(
            connection_string=settings.mongodb_url,
            database_name=settings.mongodb_database,
        )

    elif backend == StorageBackend.MEMORY:
        from core.storage.memory import MemoryStore

        logger.info("Creating in-memory store")
        return MemoryStore()

    else:
        raise ValueError(f"Unsupported backend: {backend}")
