"""
Storage abstraction layer.

Provides pluggable document storage for users, categories,
products and orders.

Supported backends:
- MongoDB (production)
- In-memory (tests, local development)
"""

from core.storage.base import (
    BaseCategoryRepository,
    BaseOrderRepository,
    BaseProductRepository,
    BaseStore,
    BaseUserRepository,
    CategoryRecord,
    DuplicateKeyError,
    OrderRecord,
    OrderStatus,
    ProductRecord,
    UserRecord,
    UserRole,
    is_valid_id,
)
from core.storage.factory import (
    create_store,
    get_storage_backend,
    StorageBackend,
)

__all__ = [
    # Abstract interfaces
    "BaseCategoryRepository",
    "BaseOrderRepository",
    "BaseProductRepository",
    "BaseStore",
    "BaseUserRepository",
    # Records
    "CategoryRecord",
    "OrderRecord",
    "OrderStatus",
    "ProductRecord",
    "UserRecord",
    "UserRole",
    "DuplicateKeyError",
    "is_valid_id",
    # Factory functions
    "create_store",
    "get_storage_backend",
    "StorageBackend",
]
