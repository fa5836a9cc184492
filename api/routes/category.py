"""
Category endpoints.

Reads are public; create/update/delete require an admin.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_category_service, is_admin
from api.schemas import (
    CategoryListResponse,
    CategoryOut,
    CategoryRequest,
    CategoryResponse,
    StatusResponse,
)
from core.logging import get_logger
from core.storage import UserRecord
from services import CategoryService


logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/category", tags=["Categories"])


@router.post("/create-category", response_model=CategoryResponse, status_code=201)
async def create_category(
    request: CategoryRequest,
    user: UserRecord = Depends(is_admin),
    categories: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    category = await categories.create(request.name)
    return CategoryResponse(
        message="New category created",
        category=CategoryOut.from_record(category),
    )


@router.put("/update-category/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    request: CategoryRequest,
    user: UserRecord = Depends(is_admin),
    categories: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    category = await categories.update(category_id, request.name)
    return CategoryResponse(
        message="Category Updated Successfully",
        category=CategoryOut.from_record(category),
    )


@router.get("/get-category", response_model=CategoryListResponse)
async def list_categories(
    categories: CategoryService = Depends(get_category_service),
) -> CategoryListResponse:
    return CategoryListResponse(
        category=[CategoryOut.from_record(c) for c in await categories.list_all()],
    )


@router.get("/single-category/{slug}", response_model=CategoryResponse)
async def get_category(
    slug: str,
    categories: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    category = await categories.get_by_slug(slug)
    return CategoryResponse(
        message="Get Single Category Successfully",
        category=CategoryOut.from_record(category),
    )


@router.delete("/delete-category/{category_id}", response_model=StatusResponse)
async def delete_category(
    category_id: str,
    user: UserRecord = Depends(is_admin),
    categories: CategoryService = Depends(get_category_service),
) -> StatusResponse:
    await categories.delete(category_id)
    return StatusResponse(message="Category Deleted Successfully")
