import os
import time
import traceback
from contextlib import asynccontextmanager
from typing import Optional
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.api.v1.routers import auth_router, category_router, order_router, product_router
from storefront.core.config import Settings, settings as default_settings
from storefront.core.db import build_engine, build_sessionmaker, create_tables
from storefront.core.exceptions import StorefrontError
from storefront.core.logging import add_context, clear_context, configure_logging, get_logger
from storefront.core.responses import error_envelope
from storefront.utils.file_saver import MediaHost

logger = get_logger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(messages) or "Invalid request"


def server_error_response(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error", error=str(exc), exc_info=exc)
    stack = None
    if not request.app.state.settings.is_production:
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=error_envelope(str(exc) or "Server error", stack))


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail
        if exc.status_code == 404 and not isinstance(exc, StorefrontError):
            # Raised by routing when no path matched
            message = f"Not Found - {request.url.path}"
        return JSONResponse(status_code=exc.status_code, content=error_envelope(message), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=error_envelope(_validation_message(exc)))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        # Only reached for failures outside the request logging middleware
        return server_error_response(request, exc)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.ENVIRONMENT, settings.LOG_LEVEL, settings.LOG_DIR)

    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: create tables and the media root
        os.makedirs(settings.MEDIA_ROOT, exist_ok=True)
        await create_tables(engine)
        logger.info("startup", environment=settings.ENVIRONMENT)
        yield
        await engine.dispose()

    app = FastAPI(title="Storefront API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)
    app.state.media_host = MediaHost.from_settings(settings)

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        clear_context()
        add_context(request_id=request.headers.get("X-Request-ID") or uuid4().hex, method=request.method, path=request.url.path)
        started = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                response = server_error_response(request, exc)
            logger.info(
                "request_completed",
                status=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return response
        finally:
            clear_context()

    # Added last so it wraps every response, error envelopes included
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CLIENT_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth_router.router, prefix="/api")
    app.include_router(category_router.router, prefix="/api")
    app.include_router(product_router.router, prefix="/api")
    app.include_router(order_router.router, prefix="/api")
    app.mount(settings.MEDIA_URL, StaticFiles(directory=settings.MEDIA_ROOT, check_dir=False), name="media")

    @app.get("/")
    async def root():
        return {
            "message": "Welcome to eCommerce API",
            "version": "1.0.0",
            "endpoints": {
                "auth": "/api/auth",
                "categories": "/api/categories",
                "products": "/api/products",
                "orders": "/api/orders",
            },
        }

    return app


app = create_app()
