# backend/hall_service/main.py

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from .api import api_booking, api_hall, api_quotation
from .core.config import settings
from .core.observability import setup_logging
from .database import SessionLocal, get_db_session
from .services.container import ServiceContainer
from .utils.errors import HallServiceError
from .utils.redis_cache import close_redis_client

setup_logging()
logger = logging.getLogger(__name__)


def process_quotation_expiration(container: ServiceContainer) -> int:
    """Expire overdue quotations once. Separated from the loop for testing."""
    with get_db_session() as db:
        return container.quotation_engine(db).expire_overdue()


async def expire_quotations_loop(container: ServiceContainer, interval: int) -> None:
    """Periodically expire DRAFT/SENT quotations whose validity has lapsed."""
    while True:
        await asyncio.sleep(interval)
        delay = 5
        for attempt in range(5):
            try:
                await asyncio.to_thread(process_quotation_expiration, container)
                break
            except OperationalError as exc:
                logger.warning("Quotation expiry sweep failed (attempt %d): %s", attempt + 1, exc)
                await asyncio.sleep(delay)
                delay = min(delay * 2, 60)


@asynccontextmanager
async def lifespan(app: FastAPI):
    task = None
    interval = settings.QUOTATION_SWEEP_INTERVAL_SECONDS
    if interval > 0:
        task = asyncio.create_task(expire_quotations_loop(app.state.container, interval))
    yield
    if task is not None:
        task.cancel()
    logger.info("Closing Redis client")
    close_redis_client()


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    app.state.container = container or ServiceContainer.build(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HallServiceError)
    async def hall_service_error_handler(request: Request, exc: HallServiceError):
        log = logger.warning if exc.status_code >= 409 else logger.info
        log("%s %s -> %s: %s %s", request.method, request.url.path, exc.status_code, exc.message, exc.field_errors)
        return ORJSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        logger.warning("Validation error at %s: %s", request.url.path, errors)
        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": jsonable_errors(errors)},
        )

    @app.get("/healthz", tags=["health"])
    def healthz():
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        return {"status": "ok"}

    api_prefix = settings.API_V1_STR
    app.include_router(api_hall.router, prefix=f"{api_prefix}/halls", tags=["halls"])
    app.include_router(api_booking.router, prefix=f"{api_prefix}/bookings", tags=["bookings"])
    app.include_router(api_quotation.router, prefix=f"{api_prefix}/quotations", tags=["quotations"])
    return app


def jsonable_errors(errors):
    """Drop non-serialisable ``ctx`` payloads (exceptions) from pydantic errors."""
    return jsonable_encoder([{k: v for k, v in err.items() if k != "ctx"} for err in errors])


app = create_app()
