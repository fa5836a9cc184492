"""
Authentication, profile and order endpoints.

- POST /register, /login, /forgot-password
- GET /user-auth, /admin-auth, /test - session checks
- PUT /profile
- GET /orders, /all-orders; PUT /order-status/{order_id}
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from api.dependencies import (
    get_account_service,
    get_order_service,
    is_admin,
    require_sign_in,
)
from api.schemas import (
    AuthCheckResponse,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    OrderOut,
    OrderStatusRequest,
    ProfileResponse,
    ProfileUpdateRequest,
    RegisterRequest,
    RegisterResponse,
    StatusResponse,
    UserOut,
)
from core.logging import get_logger
from core.storage import UserRecord
from services import AccountService, OrderService


logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    request: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
) -> RegisterResponse:
    """Create a customer account."""
    user = await accounts.register(
        name=request.name,
        email=request.email,
        password=request.password,
        phone=request.phone,
        address=request.address,
        answer=request.answer,
    )
    return RegisterResponse(user=UserOut.from_record(user))


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
) -> LoginResponse:
    """
    Exchange email and password for a token.

    Send the token back in the Authorization header, raw or as
    ``Bearer <token>``.
    """
    user, token = await accounts.login(request.email, request.password)
    return LoginResponse(user=UserOut.from_record(user), token=token)


@router.post("/forgot-password", response_model=StatusResponse)
async def forgot_password(
    request: ForgotPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> StatusResponse:
    """Reset a password using the security answer given at registration."""
    await accounts.reset_password(request.email, request.answer, request.new_password)
    return StatusResponse(message="Password Reset Successfully")


@router.get("/test", response_class=PlainTextResponse)
async def protected_test(user: UserRecord = Depends(is_admin)) -> str:
    return "Protected Routes"


@router.get("/user-auth", response_model=AuthCheckResponse)
async def user_auth(user: UserRecord = Depends(require_sign_in)) -> AuthCheckResponse:
    return AuthCheckResponse()


@router.get("/admin-auth", response_model=AuthCheckResponse)
async def admin_auth(user: UserRecord = Depends(is_admin)) -> AuthCheckResponse:
    return AuthCheckResponse()


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    request: ProfileUpdateRequest,
    user: UserRecord = Depends(require_sign_in),
    accounts: AccountService = Depends(get_account_service),
) -> ProfileResponse:
    """Update name, password, phone or address of the caller."""
    updated = await accounts.update_profile(
        user,
        name=request.name,
        password=request.password,
        phone=request.phone,
        address=request.address,
    )
    return ProfileResponse(updated_user=UserOut.from_record(updated))


@router.get("/orders", response_model=list[OrderOut])
async def my_orders(
    user: UserRecord = Depends(require_sign_in),
    orders: OrderService = Depends(get_order_service),
) -> list[OrderOut]:
    return [OrderOut.from_detail(d) for d in await orders.for_buyer(user)]


@router.get("/all-orders", response_model=list[OrderOut])
async def all_orders(
    user: UserRecord = Depends(is_admin),
    orders: OrderService = Depends(get_order_service),
) -> list[OrderOut]:
    return [OrderOut.from_detail(d) for d in await orders.all_orders()]


@router.put("/order-status/{order_id}", response_model=OrderOut)
async def update_order_status(
    order_id: str,
    request: OrderStatusRequest,
    user: UserRecord = Depends(is_admin),
    orders: OrderService = Depends(get_order_service),
) -> OrderOut:
    logger.info(
        "Updating order status",
        order_id=order_id,
        status=request.status.value,
        admin_id=user.id,
    )
    detail = await orders.update_status(order_id, request.status)
    return OrderOut.from_detail(detail)
