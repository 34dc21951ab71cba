import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from meetme.config import settings
from meetme.database import create_tables
from meetme.exception_handlers import register_exception_handlers
from meetme.middleware.logging import StructuredLoggingMiddleware, setup_logging
from meetme.routes import search
from meetme.services.search_tracker import search_tracker

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup, flush pending search audit writes on shutdown."""
    logger.info("Starting up the application...")
    await create_tables()
    logger.info("Database tables created (if not existing).")
    yield
    logger.info("Shutting down the application...")
    await search_tracker.drain()


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    setup_logging(log_level=settings.log_level, json_format=settings.log_format == "json")

    app = FastAPI(
        title=settings.app_name,
        description="Search across meetings, posts, comments and users",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(search.router, prefix="/api/v1/search", tags=["search"])

    @app.get("/health", tags=["Health"])
    async def health():
        return {"app": settings.app_name, "version": settings.app_version, "status": "ok"}

    if settings.debug:
        logger.info(f"Running in {settings.environment} mode")
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    return app


app = create_app()
