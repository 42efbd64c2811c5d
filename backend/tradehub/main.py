"""TradeHub API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TradeHubError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, trade store and push dispatcher created on startup via lifespan
    - Background post-effects drained before the database is disposed

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - notifications_enabled=False leaves app.state.notifier unset: effects become no-ops
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tradehub.api.error_handlers import register_error_handlers
from tradehub.api.routes import health, pipelines
from tradehub.config import get_settings
from tradehub.infrastructure.database import init_db
from tradehub.infrastructure.observability import setup_logging
from tradehub.infrastructure.push_client import ExpoPushDispatcher
from tradehub.infrastructure.trade_store import SqlTradeStore
from tradehub.pipelines.isolation import drain_background_tasks

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    store = SqlTradeStore(db)
    notifier = None
    if settings.notifications_enabled:
        notifier = ExpoPushDispatcher(
            store.get_push_token,
            settings.expo_push_url,
            timeout_seconds=settings.push_timeout_seconds,
        )
    app.state.trade_store = store
    app.state.notifier = notifier
    app.state.background_effects = settings.background_post_effects
    logger.info("TradeHub API started")
    yield
    logger.info("TradeHub API shutting down")
    await drain_background_tasks()
    if notifier is not None:
        await notifier.aclose()
    await db.dispose()


app = FastAPI(
    title="TradeHub Trade Engine", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes, explicit registration
app.include_router(health.router)
app.include_router(pipelines.router)

register_error_handlers(app)
