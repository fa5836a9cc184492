"""
Category and product request/response schemas.

Identifiers are exposed as ``_id`` to match the document store
convention the storefront client expects.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from api.schemas.common import require_text
from core.storage import CategoryRecord, ProductRecord


class CategoryOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    slug: str

    @classmethod
    def from_record(cls, record: CategoryRecord) -> "CategoryOut":
        return cls(id=record.id, name=record.name, slug=record.slug)


class ProductOut(BaseModel):
    """
    A product without its photo.

    ``category`` is the populated category on detail/listing endpoints
    and the bare category id on search and filter results.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    name: str
    slug: str
    description: str
    price: float
    category: Union[CategoryOut, str, None] = None
    quantity: int
    shipping: bool = False
    has_photo: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(
        cls,
        record: ProductRecord,
        category: Optional[CategoryRecord] = None,
    ) -> "ProductOut":
        return cls(
            id=record.id,
            name=record.name,
            slug=record.slug,
            description=record.description,
            price=record.price,
            category=CategoryOut.from_record(category) if category else record.category_id,
            quantity=record.quantity,
            shipping=record.shipping,
            has_photo=record.has_photo,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class CategoryRequest(BaseModel):
    """Body for creating or renaming a category."""

    name: Optional[str] = Field(
        default=None,
        validate_default=True,
        description="Category name, unique across the catalog",
        examples=["Electronics"],
    )

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value):
        return require_text(value, "Name is required")


class CategoryResponse(BaseModel):
    success: bool = True
    message: str
    category: CategoryOut


class CategoryListResponse(BaseModel):
    success: bool = True
    message: str = "All Categories List"
    category: list[CategoryOut] = Field(default_factory=list)


class ProductResponse(BaseModel):
    success: bool = True
    message: str
    product: ProductOut


class ProductListResponse(BaseModel):
    success: bool = True
    products: list[ProductOut] = Field(default_factory=list)


class LatestProductsResponse(BaseModel):
    success: bool = True
    count_total: int
    message: str = "All Products"
    products: list[ProductOut] = Field(default_factory=list)


class ProductCountResponse(BaseModel):
    success: bool = True
    total: int


class CategoryProductsResponse(BaseModel):
    success: bool = True
    category: CategoryOut
    products: list[ProductOut] = Field(default_factory=list)


class ProductFilterRequest(BaseModel):
    """Storefront sidebar filters."""

    checked: list[str] = Field(
        default_factory=list,
        description="Category ids; empty means any category",
    )
    radio: list[float] = Field(
        default_factory=list,
        description="Inclusive [min, max] price; empty means any price",
        examples=[[0, 19.99]],
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "checked": ["65f0c1d2e3a4b5c6d7e8f901"],
                    "radio": [20, 39.99],
                }
            ]
        }
    }
