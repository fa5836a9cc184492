"""
MongoDB storage backend implementation.

Documents keep Mongo conventions on disk: ObjectId ``_id`` and ObjectId
references (``category``, ``buyer``, ``products``). Records exposed to the
services carry string ids.
"""

import re
from typing import Any, Optional

from bson import Binary, ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError, PyMongoError

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
    is_valid_id,
    utcnow,
)


logger = get_logger(__name__)

NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]
WITHOUT_PHOTO = {"photo": 0}


def _oid(value: str) -> Optional[ObjectId]:
    """Convert a string id, or None when it is not a valid ObjectId."""
    return ObjectId(value) if is_valid_id(value) else None


def _oids(values: list[str]) -> list[ObjectId]:
    return [ObjectId(v) for v in values if is_valid_id(v)]


class _MongoRepository:
    """Shared collection access for the repositories of one store."""

    COLLECTION_NAME: str = ""

    def __init__(self, store: "MongoDBStore"):
        self._store = store

    @property
    def _collection(self):
        return self._store.database[self.COLLECTION_NAME]


class MongoDBUserRepository(_MongoRepository, BaseUserRepository):

    COLLECTION_NAME = "users"

    @staticmethod
    def _to_record(doc: dict[str, Any]) -> UserRecord:
        doc["id"] = str(doc.pop("_id"))
        return UserRecord.from_dict(doc)

    async def create(self, record: UserRecord) -> UserRecord:
        doc = record.to_dict()
        doc["_id"] = ObjectId(doc.pop("id"))
        try:
            await self._collection.insert_one(doc)
        except MongoDuplicateKeyError as e:
            raise DuplicateKeyError(f"email {record.email} already registered") from e
        return record

    async def get(self, user_id: str) -> Optional[UserRecord]:
        oid = _oid(user_id)
        if oid is None:
            return None
        doc = await self._collection.find_one({"_id": oid})
        return self._to_record(doc) if doc else None

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        doc = await self._collection.find_one({"email": email})
        return self._to_record(doc) if doc else None

    async def get_many(self, user_ids: list[str]) -> list[UserRecord]:
        cursor = self._collection.find({"_id": {"$in": _oids(user_ids)}})
        return [self._to_record(doc) async for doc in cursor]

    async def update(self, user_id: str, fields: dict[str, Any]) -> Optional[UserRecord]:
        oid = _oid(user_id)
        if oid is None:
            return None
        try:
            doc = await self._collection.find_one_and_update(
                {"_id": oid},
                {"$set": {**fields, "updated_at": utcnow()}},
                return_document=ReturnDocument.AFTER,
            )
        except MongoDuplicateKeyError as e:
            raise DuplicateKeyError("email already registered") from e
        return self._to_record(doc) if doc else None


class MongoDBCategoryRepository(_MongoRepository, BaseCategoryRepository):

    COLLECTION_NAME = "categories"

    @staticmethod
    def _to_record(doc: dict[str, Any]) -> CategoryRecord:
        doc["id"] = str(doc.pop("_id"))
        return CategoryRecord.from_dict(doc)

    async def create(self, record: CategoryRecord) -> CategoryRecord:
        doc = record.to_dict()
        doc["_id"] = ObjectId(doc.pop("id"))
        try:
            await self._collection.insert_one(doc)
        except MongoDuplicateKeyError as e:
            raise DuplicateKeyError(f"category {record.name} exists") from e
        return record

    async def get(self, category_id: str) -> Optional[CategoryRecord]:
        oid = _oid(category_id)
        if oid is None:
            return None
        doc = await self._collection.find_one({"_id": oid})
        return self._to_record(doc) if doc else None

    async def get_by_slug(self, slug: str) -> Optional[CategoryRecord]:
        doc = await self._collection.find_one({"slug": slug})
        return self._to_record(doc) if doc else None

    async def get_by_name(self, name: str) -> Optional[CategoryRecord]:
        doc = await self._collection.find_one({"name": name})
        return self._to_record(doc) if doc else None

    async def list_all(self) -> list[CategoryRecord]:
        cursor = self._collection.find({}).sort("_id", ASCENDING)
        return [self._to_record(doc) async for doc in cursor]

    async def update(self, category_id: str, *, name: str, slug: str) -> Optional[CategoryRecord]:
        oid = _oid(category_id)
        if oid is None:
            return None
        try:
            doc = await self._collection.find_one_and_update(
                {"_id": oid},
                {"$set": {"name": name, "slug": slug, "updated_at": utcnow()}},
                return_document=ReturnDocument.AFTER,
            )
        except MongoDuplicateKeyError as e:
            raise DuplicateKeyError(f"category {name} exists") from e
        return self._to_record(doc) if doc else None

    async def delete(self, category_id: str) -> bool:
        oid = _oid(category_id)
        if oid is None:
            return False
        result = await self._collection.delete_one({"_id": oid})
        return result.deleted_count > 0


class MongoDBProductRepository(_MongoRepository, BaseProductRepository):

    COLLECTION_NAME = "products"

    @staticmethod
    def _to_record(doc: dict[str, Any], *, with_photo: bool = False) -> ProductRecord:
        doc["id"] = str(doc.pop("_id"))
        doc["category_id"] = str(doc.pop("category"))
        return ProductRecord.from_dict(doc, with_photo=with_photo)

    @staticmethod
    def _to_document(fields: dict[str, Any]) -> dict[str, Any]:
        doc = dict(fields)
        if "id" in doc:
            doc["_id"] = ObjectId(doc.pop("id"))
        if "category_id" in doc:
            doc["category"] = ObjectId(doc.pop("category_id"))
        if "photo" in doc:
            photo = doc["photo"]
            doc["photo"] = Binary(photo) if photo is not None else None
            doc["has_photo"] = photo is not None
        return doc

    async def _find(self, query: dict[str, Any], *, sort=None, skip: int = 0, limit: int = 0) -> list[ProductRecord]:
        cursor = self._collection.find(query, WITHOUT_PHOTO)
        cursor = cursor.sort(sort or [("_id", ASCENDING)])
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return [self._to_record(doc) async for doc in cursor]

    async def create(self, record: ProductRecord) -> ProductRecord:
        doc = self._to_document(record.to_dict())
        await self._collection.insert_one(doc)
        return await self.get(record.id)

    async def get(self, product_id: str) -> Optional[ProductRecord]:
        oid = _oid(product_id)
        if oid is None:
            return None
        doc = await self._collection.find_one({"_id": oid}, WITHOUT_PHOTO)
        return self._to_record(doc) if doc else None

    async def get_by_slug(self, slug: str) -> Optional[ProductRecord]:
        doc = await self._collection.find_one({"slug": slug}, WITHOUT_PHOTO)
        return self._to_record(doc) if doc else None

    async def get_many(self, product_ids: list[str]) -> list[ProductRecord]:
        return await self._find({"_id": {"$in": _oids(product_ids)}})

    async def get_photo(self, product_id: str) -> Optional[tuple[bytes, str]]:
        oid = _oid(product_id)
        if oid is None:
            return None
        doc = await self._collection.find_one(
            {"_id": oid},
            {"photo": 1, "photo_content_type": 1},
        )
        if doc is None or doc.get("photo") is None:
            return None
        return bytes(doc["photo"]), doc.get("photo_content_type") or "application/octet-stream"

    async def update(self, product_id: str, fields: dict[str, Any]) -> Optional[ProductRecord]:
        oid = _oid(product_id)
        if oid is None:
            return None
        doc = await self._collection.find_one_and_update(
            {"_id": oid},
            {"$set": {**self._to_document(fields), "updated_at": utcnow()}},
            projection=WITHOUT_PHOTO,
            return_document=ReturnDocument.AFTER,
        )
        return self._to_record(doc) if doc else None

    async def delete(self, product_id: str) -> bool:
        oid = _oid(product_id)
        if oid is None:
            return False
        result = await self._collection.delete_one({"_id": oid})
        return result.deleted_count > 0

    async def slug_exists(self, slug: str, *, exclude_id: Optional[str] = None) -> bool:
        query: dict[str, Any] = {"slug": slug}
        excluded = _oid(exclude_id) if exclude_id else None
        if excluded is not None:
            query["_id"] = {"$ne": excluded}
        return await self._collection.count_documents(query, limit=1) > 0

    async def list_latest(self, *, skip: int = 0, limit: int = 0) -> list[ProductRecord]:
        return await self._find({}, sort=NEWEST_FIRST, skip=skip, limit=limit)

    async def count(self, *, category_id: Optional[str] = None) -> int:
        if category_id is None:
            return await self._collection.estimated_document_count()
        oid = _oid(category_id)
        if oid is None:
            return 0
        return await self._collection.count_documents({"category": oid})

    async def filter(
        self,
        *,
        category_ids: Optional[list[str]] = None,
        price_range: Optional[tuple[float, float]] = None,
    ) -> list[ProductRecord]:
        query: dict[str, Any] = {}
        if category_ids:
            query["category"] = {"$in": _oids(category_ids)}
        if price_range is not None:
            low, high = price_range
            query["price"] = {"$gte": low, "$lte": high}
        return await self._find(query)

    async def search(self, keyword: str) -> list[ProductRecord]:
        pattern = {"$regex": re.escape(keyword), "$options": "i"}
        return await self._find({"$or": [{"name": pattern}, {"description": pattern}]})

    async def list_by_category(
        self,
        category_id: str,
        *,
        exclude_id: Optional[str] = None,
        limit: int = 0,
    ) -> list[ProductRecord]:
        oid = _oid(category_id)
        if oid is None:
            return []
        query: dict[str, Any] = {"category": oid}
        excluded = _oid(exclude_id) if exclude_id else None
        if excluded is not None:
            query["_id"] = {"$ne": excluded}
        return await self._find(query, limit=limit)


class MongoDBOrderRepository(_MongoRepository, BaseOrderRepository):

    COLLECTION_NAME = "orders"

    @staticmethod
    def _to_record(doc: dict[str, Any]) -> OrderRecord:
        doc["id"] = str(doc.pop("_id"))
        doc["buyer_id"] = str(doc.pop("buyer"))
        doc["product_ids"] = [str(p) for p in doc.pop("products", [])]
        return OrderRecord.from_dict(doc)

    async def create(self, record: OrderRecord) -> OrderRecord:
        doc = record.to_dict()
        doc["_id"] = ObjectId(doc.pop("id"))
        doc["buyer"] = ObjectId(doc.pop("buyer_id"))
        doc["products"] = _oids(doc.pop("product_ids"))
        await self._collection.insert_one(doc)
        return record

    async def get(self, order_id: str) -> Optional[OrderRecord]:
        oid = _oid(order_id)
        if oid is None:
            return None
        doc = await self._collection.find_one({"_id": oid})
        return self._to_record(doc) if doc else None

    async def list_by_buyer(self, buyer_id: str) -> list[OrderRecord]:
        oid = _oid(buyer_id)
        if oid is None:
            return []
        cursor = self._collection.find({"buyer": oid}).sort(NEWEST_FIRST)
        return [self._to_record(doc) async for doc in cursor]

    async def list_all(self) -> list[OrderRecord]:
        cursor = self._collection.find({}).sort(NEWEST_FIRST)
        return [self._to_record(doc) async for doc in cursor]

    async def update_status(self, order_id: str, status: OrderStatus) -> Optional[OrderRecord]:
        oid = _oid(order_id)
        if oid is None:
            return None
        doc = await self._collection.find_one_and_update(
            {"_id": oid},
            {"$set": {"status": status.value, "updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_record(doc) if doc else None


class MongoDBStore(BaseStore):
    """
    MongoDB-backed repositories sharing a single motor client.
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str = "storefront",
        **client_options: Any,
    ):
        """
        Args:
            connection_string: MongoDB connection URI
            database_name: Database holding the storefront collections
            client_options: Extra AsyncIOMotorClient options, e.g. serverSelectionTimeoutMS
        """
        self._connection_string = connection_string
        self._database_name = database_name
        self._client_options = client_options
        self._client: Optional[AsyncIOMotorClient] = None
        self._db: Optional[AsyncIOMotorDatabase] = None

        self.users = MongoDBUserRepository(self)
        self.categories = MongoDBCategoryRepository(self)
        self.products = MongoDBProductRepository(self)
        self.orders = MongoDBOrderRepository(self)

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self._db is None:
            raise RuntimeError("Store not initialized. Call setup() first.")
        return self._db

    async def setup(self) -> None:
        """Connect and create indexes."""
        if self._client is None:
            self._client = AsyncIOMotorClient(
                self._connection_string, tz_aware=True, **self._client_options
            )
            self._db = self._client[self._database_name]

        db = self._db
        await db.users.create_index("email", unique=True)
        await db.categories.create_index("name", unique=True)
        await db.categories.create_index("slug", unique=True)
        await db.products.create_index("slug")
        await db.products.create_index("category")
        await db.products.create_index(
            [("created_at", DESCENDING), ("_id", DESCENDING)],
            name="idx_products_newest",
        )
        await db.orders.create_index(
            [("buyer", ASCENDING), ("created_at", DESCENDING)],
            name="idx_orders_buyer_created",
        )

        logger.info(
            "MongoDB store initialized",
            database=self._database_name,
        )

    async def ping(self) -> bool:
        try:
            await self.database.command("ping")
        except PyMongoError as e:
            logger.warning("MongoDB ping failed", error=str(e))
            return False
        return True

    async def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            self._db = None
        logger.info("MongoDB store closed")
