import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from walkdraw.api.main import api_router
from walkdraw.core.config import settings
from walkdraw.core.db import get_engine, init_db
from walkdraw.exceptions import InvalidInput, WalkDrawError
from walkdraw.schemas import ErrorResponse

logger = logging.getLogger(__name__)


def make_error_response(
    error_code: str,
    message: str,
    status_code: int = 400,
    details: dict | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, error_code=error_code, details=details).model_dump(),
    )


async def walkdraw_error_handler(request: Request, exc: WalkDrawError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return make_error_response(exc.error_code, exc.message, exc.status_code, exc.details)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed request bodies are client errors like any other invalid input
    fields = [".".join(str(part) for part in err["loc"] if part != "body") for err in exc.errors()]
    return make_error_response(
        InvalidInput.error_code,
        "Invalid or missing fields: " + ", ".join(f for f in fields if f),
        InvalidInput.status_code,
        {"errors": [{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()]},
    )


def create_app(*, create_tables: bool = True) -> FastAPI:
    logging.basicConfig(level=settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if create_tables:
            init_db(get_engine())
        yield

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
    )

    if settings.all_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.all_cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(WalkDrawError, walkdraw_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app


app = create_app()
