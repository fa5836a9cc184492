"""
Catalog management: categories and products.

Admin operations validate their input here; read operations return
products paired with their category so the API can render them
populated.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional

from core.config import settings
from core.logging import get_logger
from core.storage import (
    BaseStore,
    CategoryRecord,
    DuplicateKeyError,
    ProductRecord,
    is_valid_id,
)
from services.errors import Conflict, NotFound, ValidationFailed
from services.text import slugify


logger = get_logger(__name__)


@dataclass
class ProductDetail:
    """A product with its category resolved (None if the category is gone)."""
    product: ProductRecord
    category: Optional[CategoryRecord]


@dataclass
class ProductInput:
    """
    Raw product form as submitted by the admin console.

    Numbers arrive as strings from the multipart form and are parsed
    during validation.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[str] = None
    category: Optional[str] = None
    quantity: Optional[str] = None
    shipping: Optional[bool] = None
    photo: Optional[bytes] = None
    photo_content_type: Optional[str] = None


def _parse_price(raw: str) -> float:
    try:
        price = float(raw)
    except ValueError:
        raise ValidationFailed("Price must be a non-negative number") from None
    if not math.isfinite(price) or price < 0:
        raise ValidationFailed("Price must be a non-negative number")
    return round(price, 2)


def _parse_quantity(raw: str) -> int:
    try:
        quantity = int(raw)
    except ValueError:
        raise ValidationFailed("Quantity must be a non-negative integer") from None
    if quantity < 0:
        raise ValidationFailed("Quantity must be a non-negative integer")
    return quantity


class CategoryService:

    def __init__(self, store: BaseStore):
        self._categories = store.categories
        self._products = store.products

    async def _ensure_available(self, name: str, slug: str, *, exclude_id: Optional[str] = None) -> None:
        """Names and slugs are both unique; "Books" and "books" share a slug."""
        for existing in (
            await self._categories.get_by_name(name),
            await self._categories.get_by_slug(slug),
        ):
            if existing is not None and existing.id != exclude_id:
                raise Conflict("Category Already Exists")

    async def create(self, name: str) -> CategoryRecord:
        name = name.strip()
        slug = slugify(name)
        await self._ensure_available(name, slug)

        record = CategoryRecord(name=name, slug=slug)
        try:
            await self._categories.create(record)
        except DuplicateKeyError:
            raise Conflict("Category Already Exists") from None

        logger.info("Category created", category_id=record.id, slug=record.slug)
        return record

    async def update(self, category_id: str, name: str) -> CategoryRecord:
        name = name.strip()
        if await self._categories.get(category_id) is None:
            raise NotFound("Category not found")

        slug = slugify(name)
        await self._ensure_available(name, slug, exclude_id=category_id)
        try:
            updated = await self._categories.update(category_id, name=name, slug=slug)
        except DuplicateKeyError:
            raise Conflict("Category Already Exists") from None
        if updated is None:
            raise NotFound("Category not found")

        logger.info("Category updated", category_id=category_id, slug=updated.slug)
        return updated

    async def list_all(self) -> list[CategoryRecord]:
        return await self._categories.list_all()

    async def get_by_slug(self, slug: str) -> CategoryRecord:
        category = await self._categories.get_by_slug(slug)
        if category is None:
            raise NotFound("Category not found")
        return category

    async def delete(self, category_id: str) -> None:
        if await self._categories.get(category_id) is None:
            raise NotFound("Category not found")
        if await self._products.count(category_id=category_id) > 0:
            raise Conflict("Category has products")

        await self._categories.delete(category_id)
        logger.info("Category deleted", category_id=category_id)


class ProductService:

    def __init__(self, store: BaseStore):
        self._products = store.products
        self._categories = store.categories

    # =========================================
    # Admin operations
    # =========================================

    async def _validate(self, data: ProductInput) -> dict[str, Any]:
        """Check a submitted form and turn it into repository fields."""
        if not (data.name and data.name.strip()):
            raise ValidationFailed("Name is Required")
        if not (data.description and data.description.strip()):
            raise ValidationFailed("Description is Required")
        if data.price is None or not str(data.price).strip():
            raise ValidationFailed("Price is Required")
        if not (data.category and data.category.strip()):
            raise ValidationFailed("Category is Required")
        if data.quantity is None or not str(data.quantity).strip():
            raise ValidationFailed("Quantity is Required")

        price = _parse_price(str(data.price).strip())
        quantity = _parse_quantity(str(data.quantity).strip())

        if data.photo is not None:
            if len(data.photo) > settings.max_photo_bytes:
                raise ValidationFailed("Photo should be less than 1mb")
            if data.photo_content_type and not data.photo_content_type.startswith("image/"):
                raise ValidationFailed("Photo must be an image")

        category_id = data.category.strip()
        if not is_valid_id(category_id) or await self._categories.get(category_id) is None:
            raise ValidationFailed("Category not found")

        fields: dict[str, Any] = {
            "name": data.name.strip(),
            "description": data.description.strip(),
            "price": price,
            "category_id": category_id,
            "quantity": quantity,
            "shipping": bool(data.shipping),
        }
        if data.photo is not None:
            fields["photo"] = data.photo
            fields["photo_content_type"] = data.photo_content_type or "application/octet-stream"
        return fields

    async def _unique_slug(self, name: str, *, exclude_id: Optional[str] = None) -> str:
        base = slugify(name) or "product"
        slug, suffix = base, 2
        while await self._products.slug_exists(slug, exclude_id=exclude_id):
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    async def create(self, data: ProductInput) -> ProductRecord:
        fields = await self._validate(data)
        fields["slug"] = await self._unique_slug(fields["name"])

        record = await self._products.create(ProductRecord(**fields))
        logger.info(
            "Product created",
            product_id=record.id,
            slug=record.slug,
            has_photo=record.has_photo,
        )
        return record

    async def update(self, product_id: str, data: ProductInput) -> ProductRecord:
        if await self._products.get(product_id) is None:
            raise NotFound("Product not found")

        fields = await self._validate(data)
        fields["slug"] = await self._unique_slug(fields["name"], exclude_id=product_id)

        updated = await self._products.update(product_id, fields)
        if updated is None:
            raise NotFound("Product not found")

        logger.info("Product updated", product_id=product_id, photo_replaced="photo" in fields)
        return updated

    async def delete(self, product_id: str) -> None:
        if not await self._products.delete(product_id):
            raise NotFound("Product not found")
        logger.info("Product deleted", product_id=product_id)

    # =========================================
    # Storefront reads
    # =========================================

    async def _with_categories(self, products: list[ProductRecord]) -> list[ProductDetail]:
        categories = {c.id: c for c in await self._categories.list_all()}
        return [ProductDetail(p, categories.get(p.category_id)) for p in products]

    async def latest(self) -> list[ProductDetail]:
        products = await self._products.list_latest(limit=settings.latest_products_limit)
        return await self._with_categories(products)

    async def get_by_slug(self, slug: str) -> ProductDetail:
        product = await self._products.get_by_slug(slug)
        if product is None:
            raise NotFound("Product not found")
        category = await self._categories.get(product.category_id)
        return ProductDetail(product, category)

    async def get_photo(self, product_id: str) -> tuple[bytes, str]:
        photo = await self._products.get_photo(product_id)
        if photo is None:
            raise NotFound("No photo found")
        return photo

    async def count(self) -> int:
        return await self._products.count()

    async def page(self, page: int) -> list[ProductRecord]:
        if page < 1:
            raise ValidationFailed("Page must be 1 or greater")
        per_page = settings.products_per_page
        return await self._products.list_latest(skip=(page - 1) * per_page, limit=per_page)

    async def filter(
        self,
        category_ids: list[str],
        price_range: list[float],
    ) -> list[ProductRecord]:
        bounds: Optional[tuple[float, float]] = None
        if price_range:
            if len(price_range) != 2:
                raise ValidationFailed("Price range must be [min, max]")
            low, high = price_range
            bounds = (min(low, high), max(low, high))
        return await self._products.filter(category_ids=category_ids or None, price_range=bounds)

    async def search(self, keyword: str) -> list[ProductRecord]:
        keyword = keyword.strip()
        if not keyword:
            return []
        return await self._products.search(keyword)

    async def related(self, product_id: str, category_id: str) -> list[ProductDetail]:
        products = await self._products.list_by_category(
            category_id,
            exclude_id=product_id,
            limit=settings.related_products_limit,
        )
        return await self._with_categories(products)

    async def by_category_slug(self, slug: str) -> tuple[CategoryRecord, list[ProductDetail]]:
        category = await self._categories.get_by_slug(slug)
        if category is None:
            raise NotFound("Category not found")
        products = await self._products.list_by_category(category.id)
        return category, [ProductDetail(p, category) for p in products]
