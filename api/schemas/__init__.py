"""
Pydantic schemas for API request/response validation.
"""

from api.schemas.auth import (
    AuthCheckResponse,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    RegisterResponse,
    UserOut,
)
from api.schemas.catalog import (
    CategoryListResponse,
    CategoryOut,
    CategoryProductsResponse,
    CategoryRequest,
    CategoryResponse,
    LatestProductsResponse,
    ProductCountResponse,
    ProductFilterRequest,
    ProductListResponse,
    ProductOut,
    ProductResponse,
)
from api.schemas.common import ErrorResponse, StatusResponse
from api.schemas.order import (
    ClientTokenResponse,
    OrderOut,
    OrderStatusRequest,
    PaymentRequest,
    PaymentResponse,
)

__all__ = [
    "AuthCheckResponse",
    "CategoryListResponse",
    "CategoryOut",
    "CategoryProductsResponse",
    "CategoryRequest",
    "CategoryResponse",
    "ClientTokenResponse",
    "ErrorResponse",
    "ForgotPasswordRequest",
    "LatestProductsResponse",
    "LoginRequest",
    "LoginResponse",
    "OrderOut",
    "OrderStatusRequest",
    "PaymentRequest",
    "PaymentResponse",
    "ProductCountResponse",
    "ProductFilterRequest",
    "ProductListResponse",
    "ProductOut",
    "ProductResponse",
    "ProfileResponse",
    "ProfileUpdateRequest",
    "RegisterRequest",
    "RegisterResponse",
    "StatusResponse",
    "UserOut",
]
