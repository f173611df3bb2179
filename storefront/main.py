"""FastAPI application entry point.

Storefront API - catalog, session carts, wishlists, checkout and accounts.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.routes import api_router
from storefront.schemas import ErrorDetail, ErrorResponse, FieldError
from storefront.services.errors import StorefrontError
from storefront.settings import get_settings
from storefront.stores.postgres import init_db, close_db, ping_db
from storefront.stores.redis import init_redis, close_redis

logger = logging.getLogger("uvicorn.error")


def _error_response(status_code: int, code: str, message: str, detail: dict | None = None) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Initialize database
    try:
        await init_db()
        await ping_db()
        logger.info("Postgres connected")
    except Exception:
        logger.exception("Postgres init failed")

    # Initialize Redis (session store)
    try:
        await init_redis()
    except Exception:
        logger.exception("Redis init failed")

    yield

    # Shutdown
    await close_redis()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Storefront API: catalog, cart, wishlist, orders and accounts",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware (credentials needed for the session cookie)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
        """Expected business failures, rendered with their own status and code."""
        if exc.status_code >= 500:
            logger.error("[error] %s %s code=%s", request.method, request.url.path, exc.code)
        return _error_response(exc.status_code, exc.code, exc.message, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed bodies/params are 400 with per-field detail."""
        fields = [
            FieldError(
                loc=[str(part) for part in err.get("loc", ())],
                msg=err.get("msg", ""),
                type=err.get("type", ""),
            ).model_dump()
            for err in exc.errors()
        ]
        return _error_response(400, "VALIDATION_ERROR", "Invalid request", {"fields": fields})

    # Exception handler for structured error format
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        logger.exception("[error] unhandled %s %s", request.method, request.url.path)
        return _error_response(
            500,
            "INTERNAL_ERROR",
            str(exc) if settings.debug else "Internal server error",
        )

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    # Include API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
