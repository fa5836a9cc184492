"""
FastAPI application entry point.

Sets up the application with:
- Lifespan management (store and payment gateway)
- Route registration
- Middleware configuration
- Error handling
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import set_payment_gateway, set_store
from api.routes import auth_router, category_router, health_router, product_router
from api.schemas import ErrorResponse
from core.config import settings
from core.logging import configure_logging, get_logger
from core.storage import BaseStore, create_store
from services.errors import StorefrontError
from tools.payment_gateway import PaymentGateway, PaymentGatewayError, create_payment_gateway


logger = get_logger(__name__)

ERROR_RESPONSES = {
    code: {"model": ErrorResponse} for code in (400, 401, 402, 403, 404, 409)
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


def _validation_message(exc: RequestValidationError) -> str:
    """First readable message out of a pydantic error list."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    ctx = first.get("ctx") or {}
    if "error" in ctx:
        return str(ctx["error"])
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    return f"{field}: {first.get('msg')}" if field else str(first.get("msg"))


def create_app(
    store: Optional[BaseStore] = None,
    payment_gateway: Optional[PaymentGateway] = None,
) -> FastAPI:
    """
    Application factory.

    A store or gateway passed in is used as-is and left open on shutdown;
    otherwise both are built from settings.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        configure_logging()
        logger.info(
            "Starting storefront service...",
            storage_backend=settings.storage_backend,
            payment_backend=settings.payment_backend,
        )

        owns_store = store is None
        active_store = store or create_store(settings)
        await active_store.setup()
        set_store(active_store)

        set_payment_gateway(payment_gateway or create_payment_gateway(settings))

        logger.info(
            "Storefront service started",
            host=settings.server_host,
            port=settings.server_port,
        )

        yield

        # =========================================
        # Shutdown
        # =========================================
        logger.info("Shutting down storefront service...")

        set_payment_gateway(None)
        set_store(None)
        if owns_store:
            await active_store.close()

        logger.info("Storefront service stopped")

    app = FastAPI(
        title="Storefront API",
        description=(
            "E-commerce storefront backend.\n\n"
            "Catalog, accounts, cart checkout and order fulfilment."
        ),
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(auth_router, responses=ERROR_RESPONSES)
    app.include_router(category_router, responses=ERROR_RESPONSES)
    app.include_router(product_router, responses=ERROR_RESPONSES)

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        logger.info(
            "Request rejected",
            path=request.url.path,
            status_code=exc.status_code,
            reason=exc.message,
        )
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error(400, _validation_message(exc))

    @app.exception_handler(PaymentGatewayError)
    async def payment_gateway_error_handler(request: Request, exc: PaymentGatewayError):
        logger.error("Payment gateway failure", path=request.url.path, error=str(exc))
        return _error(502, "Payment gateway unavailable")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return _error(500, str(exc) if settings.debug else "An error occurred")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.server:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
    )
