"""
In-memory storage backend.

Keeps documents in per-process dicts. Used by the test suite and for
running the API locally without a MongoDB server. Query semantics match
the MongoDB backend: newest-first ordering, literal case-insensitive
search, inclusive price ranges.
"""

import copy
import itertools
from typing import Any, Callable, Optional

from core.logging import get_logger
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
    utcnow,
)


logger = get_logger(__name__)


class _Collection:
    """Insertion-ordered dict of documents keyed by id."""

    def __init__(self) -> None:
        self._docs: dict[str, dict[str, Any]] = {}
        self._sequence = itertools.count()

    def insert(self, doc: dict[str, Any]) -> None:
        stored = copy.deepcopy(doc)
        stored["_seq"] = next(self._sequence)
        self._docs[doc["id"]] = stored

    def get(self, doc_id: str) -> Optional[dict[str, Any]]:
        doc = self._docs.get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def find(
        self,
        predicate: Callable[[dict[str, Any]], bool] = lambda _: True,
        *,
        newest_first: bool = False,
    ) -> list[dict[str, Any]]:
        docs = [d for d in self._docs.values() if predicate(d)]
        if newest_first:
            docs.sort(key=lambda d: (d["created_at"], d["_seq"]), reverse=True)
        else:
            docs.sort(key=lambda d: d["_seq"])
        return [copy.deepcopy(d) for d in docs]

    def update(self, doc_id: str, fields: dict[str, Any]) -> Optional[dict[str, Any]]:
        doc = self._docs.get(doc_id)
        if doc is None:
            return None
        doc.update(copy.deepcopy(fields))
        doc["updated_at"] = utcnow()
        return copy.deepcopy(doc)

    def delete(self, doc_id: str) -> bool:
        return self._docs.pop(doc_id, None) is not None

    def clear(self) -> None:
        self._docs.clear()


def _without_photo(doc: dict[str, Any]) -> dict[str, Any]:
    doc["has_photo"] = doc.get("photo") is not None
    doc.pop("photo", None)
    return doc


class MemoryUserRepository(BaseUserRepository):

    def __init__(self) -> None:
        self._users = _Collection()

    async def create(self, record: UserRecord) -> UserRecord:
        if await self.get_by_email(record.email) is not None:
            raise DuplicateKeyError(f"email {record.email} already registered")
        self._users.insert(record.to_dict())
        return record

    async def get(self, user_id: str) -> Optional[UserRecord]:
        doc = self._users.get(user_id)
        return UserRecord.from_dict(doc) if doc else None

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        docs = self._users.find(lambda d: d["email"] == email)
        return UserRecord.from_dict(docs[0]) if docs else None

    async def get_many(self, user_ids: list[str]) -> list[UserRecord]:
        wanted = set(user_ids)
        return [UserRecord.from_dict(d) for d in self._users.find(lambda d: d["id"] in wanted)]

    async def update(self, user_id: str, fields: dict[str, Any]) -> Optional[UserRecord]:
        email = fields.get("email")
        if email is not None:
            existing = await self.get_by_email(email)
            if existing is not None and existing.id != user_id:
                raise DuplicateKeyError(f"email {email} already registered")
        doc = self._users.update(user_id, fields)
        return UserRecord.from_dict(doc) if doc else None


class MemoryCategoryRepository(BaseCategoryRepository):

    def __init__(self) -> None:
        self._categories = _Collection()

    def _taken(self, name: str, slug: str, exclude_id: Optional[str] = None) -> bool:
        return bool(self._categories.find(
            lambda d: (d["name"] == name or d["slug"] == slug) and d["id"] != exclude_id
        ))

    async def create(self, record: CategoryRecord) -> CategoryRecord:
        if self._taken(record.name, record.slug):
            raise DuplicateKeyError(f"category {record.name} exists")
        self._categories.insert(record.to_dict())
        return record

    async def get(self, category_id: str) -> Optional[CategoryRecord]:
        doc = self._categories.get(category_id)
        return CategoryRecord.from_dict(doc) if doc else None

    async def get_by_slug(self, slug: str) -> Optional[CategoryRecord]:
        docs = self._categories.find(lambda d: d["slug"] == slug)
        return CategoryRecord.from_dict(docs[0]) if docs else None

    async def get_by_name(self, name: str) -> Optional[CategoryRecord]:
        docs = self._categories.find(lambda d: d["name"] == name)
        return CategoryRecord.from_dict(docs[0]) if docs else None

    async def list_all(self) -> list[CategoryRecord]:
        return [CategoryRecord.from_dict(d) for d in self._categories.find()]

    async def update(self, category_id: str, *, name: str, slug: str) -> Optional[CategoryRecord]:
        if self._taken(name, slug, exclude_id=category_id):
            raise DuplicateKeyError(f"category {name} exists")
        doc = self._categories.update(category_id, {"name": name, "slug": slug})
        return CategoryRecord.from_dict(doc) if doc else None

    async def delete(self, category_id: str) -> bool:
        return self._categories.delete(category_id)


class MemoryProductRepository(BaseProductRepository):

    def __init__(self) -> None:
        self._products = _Collection()

    def _records(self, docs: list[dict[str, Any]]) -> list[ProductRecord]:
        return [ProductRecord.from_dict(_without_photo(d)) for d in docs]

    async def create(self, record: ProductRecord) -> ProductRecord:
        self._products.insert(record.to_dict())
        return await self.get(record.id)

    async def get(self, product_id: str) -> Optional[ProductRecord]:
        doc = self._products.get(product_id)
        return ProductRecord.from_dict(_without_photo(doc)) if doc else None

    async def get_by_slug(self, slug: str) -> Optional[ProductRecord]:
        docs = self._products.find(lambda d: d["slug"] == slug)
        return self._records(docs)[0] if docs else None

    async def get_many(self, product_ids: list[str]) -> list[ProductRecord]:
        wanted = set(product_ids)
        return self._records(self._products.find(lambda d: d["id"] in wanted))

    async def get_photo(self, product_id: str) -> Optional[tuple[bytes, str]]:
        doc = self._products.get(product_id)
        if doc is None or doc.get("photo") is None:
            return None
        return doc["photo"], doc.get("photo_content_type") or "application/octet-stream"

    async def update(self, product_id: str, fields: dict[str, Any]) -> Optional[ProductRecord]:
        doc = self._products.update(product_id, fields)
        return ProductRecord.from_dict(_without_photo(doc)) if doc else None

    async def delete(self, product_id: str) -> bool:
        return self._products.delete(product_id)

    async def slug_exists(self, slug: str, *, exclude_id: Optional[str] = None) -> bool:
        return bool(self._products.find(
            lambda d: d["slug"] == slug and d["id"] != exclude_id
        ))

    async def list_latest(self, *, skip: int = 0, limit: int = 0) -> list[ProductRecord]:
        docs = self._products.find(newest_first=True)
        end = skip + limit if limit else None
        return self._records(docs[skip:end])

    async def count(self, *, category_id: Optional[str] = None) -> int:
        if category_id is None:
            return len(self._products.find())
        return len(self._products.find(lambda d: d["category_id"] == category_id))

    async def filter(
        self,
        *,
        category_ids: Optional[list[str]] = None,
        price_range: Optional[tuple[float, float]] = None,
    ) -> list[ProductRecord]:
        def matches(doc: dict[str, Any]) -> bool:
            if category_ids and doc["category_id"] not in category_ids:
                return False
            if price_range is not None:
                low, high = price_range
                if not low <= doc["price"] <= high:
                    return False
            return True

        return self._records(self._products.find(matches))

    async def search(self, keyword: str) -> list[ProductRecord]:
        needle = keyword.casefold()
        return self._records(self._products.find(
            lambda d: needle in d["name"].casefold() or needle in d["description"].casefold()
        ))

    async def list_by_category(
        self,
        category_id: str,
        *,
        exclude_id: Optional[str] = None,
        limit: int = 0,
    ) -> list[ProductRecord]:
        docs = self._products.find(
            lambda d: d["category_id"] == category_id and d["id"] != exclude_id
        )
        return self._records(docs[:limit] if limit else docs)


class MemoryOrderRepository(BaseOrderRepository):

    def __init__(self) -> None:
        self._orders = _Collection()

    async def create(self, record: OrderRecord) -> OrderRecord:
        self._orders.insert(record.to_dict())
        return record

    async def get(self, order_id: str) -> Optional[OrderRecord]:
        doc = self._orders.get(order_id)
        return OrderRecord.from_dict(doc) if doc else None

    async def list_by_buyer(self, buyer_id: str) -> list[OrderRecord]:
        docs = self._orders.find(lambda d: d["buyer_id"] == buyer_id, newest_first=True)
        return [OrderRecord.from_dict(d) for d in docs]

    async def list_all(self) -> list[OrderRecord]:
        return [OrderRecord.from_dict(d) for d in self._orders.find(newest_first=True)]

    async def update_status(self, order_id: str, status: OrderStatus) -> Optional[OrderRecord]:
        doc = self._orders.update(order_id, {"status": status.value})
        return OrderRecord.from_dict(doc) if doc else None


class MemoryStore(BaseStore):
    """All repositories backed by process memory."""

    def __init__(self) -> None:
        self.users = MemoryUserRepository()
        self.categories = MemoryCategoryRepository()
        self.products = MemoryProductRepository()
        self.orders = MemoryOrderRepository()

    async def setup(self) -> None:
        logger.info("In-memory store initialized")

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        logger.info("In-memory store closed")
