"""
FastAPI dependencies for dependency injection.

Provides the store, the payment gateway and the services built on them
to route handlers, plus the sign-in and admin guards.
"""

from typing import Optional

from fastapi import Depends, Header

from core.security import extract_token
from core.storage import BaseStore, UserRecord
from services import AccountService, CategoryService, OrderService, ProductService
from tools.payment_gateway import PaymentGateway


# Global singletons (set during app lifespan)
_store: Optional[BaseStore] = None
_payment_gateway: Optional[PaymentGateway] = None


def set_store(store: Optional[BaseStore]) -> None:
    """Set the global store instance."""
    global _store
    _store = store


def set_payment_gateway(gateway: Optional[PaymentGateway]) -> None:
    """Set the global payment gateway instance."""
    global _payment_gateway
    _payment_gateway = gateway


async def get_store() -> BaseStore:
    """
    Dependency that provides the store.

    Usage:
        @router.get("/ready")
        async def ready(store: BaseStore = Depends(get_store)):
            ...
    """
    if _store is None:
        raise RuntimeError("Store not initialized")
    return _store


async def get_payment_gateway() -> PaymentGateway:
    if _payment_gateway is None:
        raise RuntimeError("Payment gateway not initialized")
    return _payment_gateway


async def get_account_service(store: BaseStore = Depends(get_store)) -> AccountService:
    return AccountService(store)


async def get_category_service(store: BaseStore = Depends(get_store)) -> CategoryService:
    return CategoryService(store)


async def get_product_service(store: BaseStore = Depends(get_store)) -> ProductService:
    return ProductService(store)


async def get_order_service(
    store: BaseStore = Depends(get_store),
    gateway: PaymentGateway = Depends(get_payment_gateway),
) -> OrderService:
    return OrderService(store, gateway)


async def require_sign_in(
    authorization: Optional[str] = Header(default=None),
    accounts: AccountService = Depends(get_account_service),
) -> UserRecord:
    """
    Resolve the caller from the Authorization header.

    Accepts a raw token or ``Bearer <token>``; anything unusable is a 401.
    """
    return await accounts.authenticate(extract_token(authorization))


async def is_admin(user: UserRecord = Depends(require_sign_in)) -> UserRecord:
    """Signed-in caller who must also hold the admin role (403 otherwise)."""
    return AccountService.require_admin(user)
