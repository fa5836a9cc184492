"""
Product catalog and checkout endpoints.

Admin (multipart forms):
- POST /create-product, PUT /update-product/{pid}, DELETE /delete-product/{pid}

Storefront:
- GET /get-product, /get-product/{slug}, /product-photo/{pid}
- POST /product-filters, GET /product-count, /product-list/{page}
- GET /search/{keyword}, /related-product/{pid}/{cid}, /product-category/{slug}

Checkout:
- GET /braintree/token, POST /braintree/payment
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from api.dependencies import (
    get_order_service,
    get_product_service,
    is_admin,
    require_sign_in,
)
from api.schemas import (
    CategoryOut,
    CategoryProductsResponse,
    ClientTokenResponse,
    LatestProductsResponse,
    PaymentRequest,
    PaymentResponse,
    ProductCountResponse,
    ProductFilterRequest,
    ProductListResponse,
    ProductOut,
    ProductResponse,
    StatusResponse,
)
from core.config import settings
from core.logging import get_logger
from core.storage import UserRecord
from services import OrderService, ProductInput, ProductService


logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/product", tags=["Products"])

TRUE_FLAGS = {"1", "true", "yes", "on"}


async def _product_form(
    name: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    price: Optional[str] = Form(default=None),
    category: Optional[str] = Form(default=None),
    quantity: Optional[str] = Form(default=None),
    shipping: Optional[str] = Form(default=None),
    photo: Optional[UploadFile] = File(default=None),
) -> ProductInput:
    """Collect the admin product form; validation happens in the service."""
    photo_bytes = None
    content_type = None
    if photo is not None and photo.filename:
        # One byte past the limit is enough to reject oversize uploads
        photo_bytes = await photo.read(settings.max_photo_bytes + 1)
        content_type = photo.content_type
        await photo.close()

    return ProductInput(
        name=name,
        description=description,
        price=price,
        category=category,
        quantity=quantity,
        shipping=(shipping or "").strip().lower() in TRUE_FLAGS,
        photo=photo_bytes,
        photo_content_type=content_type,
    )


# =========================================
# Admin
# =========================================

@router.post("/create-product", response_model=ProductResponse, status_code=201)
async def create_product(
    form: ProductInput = Depends(_product_form),
    user: UserRecord = Depends(is_admin),
    products: ProductService = Depends(get_product_service),
) -> ProductResponse:
    product = await products.create(form)
    return ProductResponse(
        message="Product Created Successfully",
        product=ProductOut.from_record(product),
    )


@router.put("/update-product/{pid}", response_model=ProductResponse)
async def update_product(
    pid: str,
    form: ProductInput = Depends(_product_form),
    user: UserRecord = Depends(is_admin),
    products: ProductService = Depends(get_product_service),
) -> ProductResponse:
    product = await products.update(pid, form)
    return ProductResponse(
        message="Product Updated Successfully",
        product=ProductOut.from_record(product),
    )


@router.delete("/delete-product/{pid}", response_model=StatusResponse)
async def delete_product(
    pid: str,
    user: UserRecord = Depends(is_admin),
    products: ProductService = Depends(get_product_service),
) -> StatusResponse:
    await products.delete(pid)
    return StatusResponse(message="Product Deleted successfully")


# =========================================
# Storefront
# =========================================

@router.get("/get-product", response_model=LatestProductsResponse)
async def latest_products(
    products: ProductService = Depends(get_product_service),
) -> LatestProductsResponse:
    """Newest products with their category."""
    details = await products.latest()
    return LatestProductsResponse(
        count_total=len(details),
        products=[ProductOut.from_record(d.product, d.category) for d in details],
    )


@router.get("/get-product/{slug}", response_model=ProductResponse)
async def get_product(
    slug: str,
    products: ProductService = Depends(get_product_service),
) -> ProductResponse:
    detail = await products.get_by_slug(slug)
    return ProductResponse(
        message="Single Product Fetched",
        product=ProductOut.from_record(detail.product, detail.category),
    )


@router.get(
    "/product-photo/{pid}",
    response_class=Response,
    responses={200: {"content": {"image/*": {}}}},
)
async def product_photo(
    pid: str,
    products: ProductService = Depends(get_product_service),
) -> Response:
    data, content_type = await products.get_photo(pid)
    return Response(content=data, media_type=content_type)


@router.post("/product-filters", response_model=ProductListResponse)
async def filter_products(
    request: ProductFilterRequest,
    products: ProductService = Depends(get_product_service),
) -> ProductListResponse:
    matches = await products.filter(request.checked, request.radio)
    return ProductListResponse(products=[ProductOut.from_record(p) for p in matches])


@router.get("/product-count", response_model=ProductCountResponse)
async def product_count(
    products: ProductService = Depends(get_product_service),
) -> ProductCountResponse:
    return ProductCountResponse(total=await products.count())


@router.get("/product-list", response_model=ProductListResponse)
@router.get("/product-list/{page}", response_model=ProductListResponse)
async def product_page(
    page: int = 1,
    products: ProductService = Depends(get_product_service),
) -> ProductListResponse:
    """One page of the catalog, newest first."""
    items = await products.page(page)
    return ProductListResponse(products=[ProductOut.from_record(p) for p in items])


@router.get("/search/{keyword:path}", response_model=list[ProductOut])
async def search_products(
    keyword: str,
    products: ProductService = Depends(get_product_service),
) -> list[ProductOut]:
    return [ProductOut.from_record(p) for p in await products.search(keyword)]


@router.get("/related-product/{pid}/{cid}", response_model=ProductListResponse)
async def related_products(
    pid: str,
    cid: str,
    products: ProductService = Depends(get_product_service),
) -> ProductListResponse:
    details = await products.related(pid, cid)
    return ProductListResponse(
        products=[ProductOut.from_record(d.product, d.category) for d in details],
    )


@router.get("/product-category/{slug}", response_model=CategoryProductsResponse)
async def products_in_category(
    slug: str,
    products: ProductService = Depends(get_product_service),
) -> CategoryProductsResponse:
    category, details = await products.by_category_slug(slug)
    return CategoryProductsResponse(
        category=CategoryOut.from_record(category),
        products=[ProductOut.from_record(d.product, d.category) for d in details],
    )


# =========================================
# Checkout
# =========================================

@router.get("/braintree/token", response_model=ClientTokenResponse)
async def payment_token(
    orders: OrderService = Depends(get_order_service),
) -> ClientTokenResponse:
    """Client token for the payment drop-in."""
    return ClientTokenResponse(client_token=await orders.client_token())


@router.post("/braintree/payment", response_model=PaymentResponse)
async def payment(
    request: PaymentRequest,
    user: UserRecord = Depends(require_sign_in),
    orders: OrderService = Depends(get_order_service),
) -> PaymentResponse:
    """Charge the cart and place an order for the caller."""
    order = await orders.checkout(user, request.nonce, [item.id for item in request.cart])
    return PaymentResponse(order_id=order.id)
