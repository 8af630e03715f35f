import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.endpoints import admin as admin_api
from app.api.endpoints import marketplace as marketplace_api
from app.api.endpoints import orders as orders_api
from app.api.endpoints import user as user_api
from app.core.context import AppContext
from app.core.errors import MarketplaceError
from app.core.logging_config import configure_logging
from app.db.init_db import init_db, seed_attribute_taxonomies
from app.db.session import engine, SessionLocal
from app.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

# HTTP status -> error code for errors raised outside the marketplace core
HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "poleplace_validation_error",
    status.HTTP_401_UNAUTHORIZED: "poleplace_not_authenticated",
    status.HTTP_403_FORBIDDEN: "poleplace_not_authorized",
    status.HTTP_404_NOT_FOUND: "poleplace_not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "poleplace_method_not_allowed",
}


def error_response(status_code: int, code: str, message, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=code, message=message).model_dump(),
        headers=headers,
    )


async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return error_response(exc.status_code, exc.code, exc.message, headers=headers)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    code = HTTP_ERROR_CODES.get(exc.status_code, "poleplace_error")
    return error_response(exc.status_code, code, exc.detail, headers=getattr(exc, "headers", None))


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request.")
    return error_response(status.HTTP_400_BAD_REQUEST, "poleplace_validation_error", message)


def install() -> None:
    """Create the tables and seed the attribute taxonomies in the configured database."""
    init_db(engine)
    db = SessionLocal()
    try:
        seed_attribute_taxonomies(db)
    finally:
        db.close()


@asynccontextmanager
async def install_lifespan(app: FastAPI):
    install()
    yield


def create_app(context: AppContext = None, seed: bool = True) -> FastAPI:
    """
    Build the API application. The marketplace services live on app.state.context
    and reach the endpoints through the get_context dependency.
    """
    configure_logging()

    app = FastAPI(title="PolePlace Marketplace API", version="1.0.0", lifespan=install_lifespan if seed else None)
    app.state.context = context or AppContext()

    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    # Include API routers
    app.include_router(marketplace_api.router, prefix="/api/v1/marketplace", tags=["Marketplace"])
    app.include_router(orders_api.router, prefix="/api/v1/orders", tags=["Orders"])
    app.include_router(user_api.router, prefix="/api/v1/user", tags=["User"])
    app.include_router(admin_api.router, prefix="/api/v1/admin", tags=["Admin"])

    @app.get("/ping", tags=["Health Check"])
    async def ping():
        return {"message": "pong"}

    return app


app = create_app()
