"""
Business services sitting between the API routes and the store.
"""

from services.accounts import AccountService
from services.catalog import CategoryService, ProductDetail, ProductInput, ProductService
from services.errors import StorefrontError
from services.orders import OrderDetail, OrderService

__all__ = [
    "AccountService",
    "CategoryService",
    "OrderDetail",
    "OrderService",
    "ProductDetail",
    "ProductInput",
    "ProductService",
    "StorefrontError",
]
