"""
API route modules.
"""

from api.routes.auth import router as auth_router
from api.routes.category import router as category_router
from api.routes.health import router as health_router
from api.routes.product import router as product_router

__all__ = ["auth_router", "category_router", "health_router", "product_router"]
