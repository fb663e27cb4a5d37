"""
FastAPI application entry point.
Assembles the app with routers, middleware, lifespan handlers, and exception handlers.
"""

import asyncio
import contextlib
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from worklio.api.v1.router import api_router
from worklio.core.config import settings
from worklio.core.logging import get_logger, setup_logging
from worklio.db.init_db import create_tables
from worklio.db.session import init_db, close_db
from worklio.deps.di_container import build_container, set_container
from worklio.core.integrations.observability import setup_observability

logger = get_logger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    enabled=settings.RATE_LIMIT_ENABLED,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    Initializes DB, DI container and the exchange rate scheduler.
    """
    # Startup
    setup_logging()

    await init_db()
    if settings.DB_AUTO_CREATE_TABLES:
        await create_tables()

    container = build_container()
    app.state.container = container
    set_container(container)

    scheduler = None
    scheduler_task = None
    if settings.EXCHANGE_RATE_REFRESH_ENABLED:
        scheduler = container.exchange_rate_scheduler()
        scheduler_task = asyncio.create_task(scheduler.run(), name="exchange-rate-scheduler")
    else:
        logger.info("Exchange rate refresh disabled")

    yield

    # Shutdown
    try:
        if scheduler_task is not None:
            await stop_scheduler(scheduler, scheduler_task)
    finally:
        await close_db()


async def stop_scheduler(scheduler, scheduler_task: asyncio.Task, timeout: float = 5) -> None:
    """Signal the scheduler, give it ``timeout`` seconds, then cancel it."""
    scheduler.stop()
    try:
        await asyncio.wait_for(scheduler_task, timeout=timeout)
    except asyncio.TimeoutError:
        scheduler_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await scheduler_task
    except Exception:
        logger.exception("Exchange rate scheduler exited with an error")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description="Time tracking and invoicing reporting API",
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    setup_observability(app)

    from worklio.api.v1.endpoints.health import get_health
    from fastapi import Request

    @app.get("/health", response_model=None, include_in_schema=False)
    async def root_health(request: Request):
        """Root-level health check endpoint."""
        return await get_health(request)

    from worklio.core.exceptions import setup_exception_handlers
    setup_exception_handlers(app)

    return app


app = create_app()
