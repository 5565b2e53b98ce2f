import asyncio
from contextlib import asynccontextmanager
from pathlib import Path

from alembic import command  # type: ignore
from alembic.config import Config
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from youthsync.config import settings
from youthsync.database import engine
from youthsync.middlewares import TimingMiddleware, add_error_handlers
from youthsync.routers import attendance_router, health_router
from youthsync.utils.logging import get_logger

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def run_migrations() -> None:
    alembic_cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    command.upgrade(alembic_cfg, "head")


# Lifecycle Manager
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Server starting up... DB URL: %s", settings.DATABASE_URL.split("@")[-1])
    if settings.AUTO_MIGRATE:
        logger.info("Checking for database migrations...")
        # env.py drives its own event loop, so it cannot share this one.
        await asyncio.to_thread(run_migrations)
        logger.info("Database is up to date.")
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection established.")
    except (SQLAlchemyError, OSError):
        logger.exception("Database connection failed; requests will return 503")

    yield

    logger.info("Server shutting down...")
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials="*" not in settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(TimingMiddleware)
    add_error_handlers(app)

    # --- Register Routers ---
    app.include_router(attendance_router)
    app.include_router(health_router)

    @app.get("/")
    async def root():
        return {
            "message": f"Welcome to {settings.PROJECT_NAME}",
            "usage": "POST /attendance, GET /report, GET /export",
            "docs": "/docs",
            "version": settings.VERSION,
        }

    return app


app = create_app()


def start():
    import uvicorn

    uvicorn.run(
        "youthsync.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
