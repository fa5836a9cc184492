"""
Abstract base classes for storage backends.

This module defines the records persisted by the storefront and the
repository contracts every backend must follow, so the services never
talk to a driver directly.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any, Optional

from bson import ObjectId


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate a document id in the 24-hex ObjectId format."""
    return str(ObjectId())


def is_valid_id(value: Any) -> bool:
    return isinstance(value, str) and ObjectId.is_valid(value)


class UserRole(IntEnum):
    CUSTOMER = 0
    ADMIN = 1


class OrderStatus(str, Enum):
    """Fulfilment states an admin can move an order through."""
    NOT_PROCESSED = "Not Processed"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


@dataclass
class UserRecord:
    name: str
    email: str
    password: str  # bcrypt hash
    phone: str
    address: str
    answer: str  # bcrypt hash
    role: int = UserRole.CUSTOMER
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "password": self.password,
            "phone": self.phone,
            "address": self.address,
            "answer": self.answer,
            "role": int(self.role),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserRecord":
        return cls(
            id=data["id"],
            name=data["name"],
            email=data["email"],
            password=data["password"],
            phone=data.get("phone", ""),
            address=data.get("address", ""),
            answer=data.get("answer", ""),
            role=data.get("role", UserRole.CUSTOMER),
            created_at=data.get("created_at", utcnow()),
            updated_at=data.get("updated_at", utcnow()),
        )


@dataclass
class CategoryRecord:
    name: str
    slug: str
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CategoryRecord":
        return cls(
            id=data["id"],
            name=data["name"],
            slug=data["slug"],
            created_at=data.get("created_at", utcnow()),
            updated_at=data.get("updated_at", utcnow()),
        )


@dataclass
class ProductRecord:
    """
    A catalog product.

    ``photo`` is only populated when the record was loaded for the photo
    endpoint; listings leave it as None and report ``has_photo`` instead.
    """
    name: str
    slug: str
    description: str
    price: float
    category_id: str
    quantity: int
    shipping: bool = False
    photo: Optional[bytes] = None
    photo_content_type: Optional[str] = None
    has_photo: bool = False
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "price": self.price,
            "category_id": self.category_id,
            "quantity": self.quantity,
            "shipping": self.shipping,
            "photo": self.photo,
            "photo_content_type": self.photo_content_type,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, with_photo: bool = False) -> "ProductRecord":
        photo = data.get("photo")
        return cls(
            id=data["id"],
            name=data["name"],
            slug=data["slug"],
            description=data.get("description", ""),
            price=data.get("price", 0.0),
            category_id=data["category_id"],
            quantity=data.get("quantity", 0),
            shipping=data.get("shipping", False),
            photo=bytes(photo) if (with_photo and photo is not None) else None,
            photo_content_type=data.get("photo_content_type"),
            has_photo=data.get("has_photo", photo is not None),
            created_at=data.get("created_at", utcnow()),
            updated_at=data.get("updated_at", utcnow()),
        )


@dataclass
class OrderRecord:
    buyer_id: str
    product_ids: list[str] = field(default_factory=list)
    payment: dict[str, Any] = field(default_factory=dict)
    status: OrderStatus = OrderStatus.NOT_PROCESSED
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "buyer_id": self.buyer_id,
            "product_ids": list(self.product_ids),
            "payment": self.payment,
            "status": self.status.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrderRecord":
        return cls(
            id=data["id"],
            buyer_id=data["buyer_id"],
            product_ids=list(data.get("product_ids", [])),
            payment=data.get("payment", {}),
            status=OrderStatus(data.get("status", OrderStatus.NOT_PROCESSED.value)),
            created_at=data.get("created_at", utcnow()),
            updated_at=data.get("updated_at", utcnow()),
        )


class DuplicateKeyError(Exception):
    """A unique field (user email, category name or slug) is already taken."""
    pass


class BaseUserRepository(ABC):

    @abstractmethod
    async def create(self, record: UserRecord) -> UserRecord:
        """
        Insert a new user.

        Raises:
            DuplicateKeyError: If the email is already registered
        """
        pass

    @abstractmethod
    async def get(self, user_id: str) -> Optional[UserRecord]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        pass

    @abstractmethod
    async def get_many(self, user_ids: list[str]) -> list[UserRecord]:
        pass

    @abstractmethod
    async def update(self, user_id: str, fields: dict[str, Any]) -> Optional[UserRecord]:
        """
        Set the given fields and return the updated record.

        Returns None if no user has that id.
        """
        pass


class BaseCategoryRepository(ABC):

    @abstractmethod
    async def create(self, record: CategoryRecord) -> CategoryRecord:
        """
        Raises:
            DuplicateKeyError: If the name is already used
        """
        pass

    @abstractmethod
    async def get(self, category_id: str) -> Optional[CategoryRecord]:
        pass

    @abstractmethod
    async def get_by_slug(self, slug: str) -> Optional[CategoryRecord]:
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[CategoryRecord]:
        pass

    @abstractmethod
    async def list_all(self) -> list[CategoryRecord]:
        """All categories, oldest first."""
        pass

    @abstractmethod
    async def update(self, category_id: str, *, name: str, slug: str) -> Optional[CategoryRecord]:
        pass

    @abstractmethod
    async def delete(self, category_id: str) -> bool:
        pass


class BaseProductRepository(ABC):
    """
    Product storage.

    Every read except get_photo leaves the photo bytes out.
    """

    @abstractmethod
    async def create(self, record: ProductRecord) -> ProductRecord:
        pass

    @abstractmethod
    async def get(self, product_id: str) -> Optional[ProductRecord]:
        pass

    @abstractmethod
    async def get_by_slug(self, slug: str) -> Optional[ProductRecord]:
        pass

    @abstractmethod
    async def get_many(self, product_ids: list[str]) -> list[ProductRecord]:
        pass

    @abstractmethod
    async def get_photo(self, product_id: str) -> Optional[tuple[bytes, str]]:
        """Return (bytes, content_type), or None if there is no photo."""
        pass

    @abstractmethod
    async def update(self, product_id: str, fields: dict[str, Any]) -> Optional[ProductRecord]:
        pass

    @abstractmethod
    async def delete(self, product_id: str) -> bool:
        pass

    @abstractmethod
    async def slug_exists(self, slug: str, *, exclude_id: Optional[str] = None) -> bool:
        pass

    @abstractmethod
    async def list_latest(self, *, skip: int = 0, limit: int = 0) -> list[ProductRecord]:
        """Newest first. A limit of 0 means no limit."""
        pass

    @abstractmethod
    async def count(self, *, category_id: Optional[str] = None) -> int:
        pass

    @abstractmethod
    async def filter(
        self,
        *,
        category_ids: Optional[list[str]] = None,
        price_range: Optional[tuple[float, float]] = None,
    ) -> list[ProductRecord]:
        """
        Products in any of ``category_ids`` with a price inside the
        inclusive ``price_range``. None or empty means unrestricted.
        """
        pass

    @abstractmethod
    async def search(self, keyword: str) -> list[ProductRecord]:
        """Case-insensitive literal substring match on name or description."""
        pass

    @abstractmethod
    async def list_by_category(
        self,
        category_id: str,
        *,
        exclude_id: Optional[str] = None,
        limit: int = 0,
    ) -> list[ProductRecord]:
        pass


class BaseOrderRepository(ABC):

    @abstractmethod
    async def create(self, record: OrderRecord) -> OrderRecord:
        pass

    @abstractmethod
    async def get(self, order_id: str) -> Optional[OrderRecord]:
        pass

    @abstractmethod
    async def list_by_buyer(self, buyer_id: str) -> list[OrderRecord]:
        """Orders of one buyer, newest first."""
        pass

    @abstractmethod
    async def list_all(self) -> list[OrderRecord]:
        """Every order, newest first."""
        pass

    @abstractmethod
    async def update_status(self, order_id: str, status: OrderStatus) -> Optional[OrderRecord]:
        pass


class BaseStore(ABC):
    """
    Bundle of repositories sharing one backend connection.

    ``setup`` must be idempotent (connect, create indexes);
    ``close`` releases the connection.
    """

    users: BaseUserRepository
    categories: BaseCategoryRepository
    products: BaseProductRepository
    orders: BaseOrderRepository

    @abstractmethod
    async def setup(self) -> None:
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """Return True if the backend is reachable."""
        pass

    @abstractmethod
    async def close(self) -> None:
        pass
