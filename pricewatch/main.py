"""
pricewatch/main.py

FastAPI application: scrape trigger, extraction preview and the twice-daily
scrape schedule.
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

logger = logging.getLogger(__name__)

DATABASE_ENV_NAMES = (
    "DATABASE_URL",
    "SUPABASE_DB_URL",
    "CLOUD_DATABASE_URL",
    "LOCAL_DATABASE_URL",
)


def _validate_env() -> None:
    """
    Fail fast when the process cannot serve its endpoints.

    Every problem is collected before raising so one restart fixes them all.
    """

    from db.config import load_env_files

    load_env_files()

    problems: list[str] = []
    if not any(os.getenv(name, "").strip() for name in DATABASE_ENV_NAMES):
        problems.append("No database URL configured. Set one of: " + ", ".join(DATABASE_ENV_NAMES) + ".")
    if not os.getenv("SCRAPE_CRON_SECRET", "").strip():
        problems.append("SCRAPE_CRON_SECRET is not set. It guards POST /scrape-prices.")

    if problems:
        raise RuntimeError(
            "Startup validation failed:\n" + "\n".join(f"  - {problem}" for problem in problems)
        )


def _configure_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _verify_database() -> None:
    """
    Check connectivity and that the price-tracking tables exist.

    Migrations are never applied here; a missing table aborts startup.
    """

    from sqlalchemy import inspect, text
    from sqlalchemy.exc import SQLAlchemyError

    import db.models  # noqa: F401  registers ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
            existing = set(inspect(connection).get_table_names())
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc

    missing = sorted(set(Base.metadata.tables) - existing)
    if missing:
        logger.critical(
            "Missing tables %s. Run 'alembic upgrade head' and restart.",
            ", ".join(missing),
        )
        raise RuntimeError(f"Schema mismatch, missing tables: {', '.join(missing)}.")
    logger.info("Database connectivity and schema confirmed")


def _scheduler_enabled() -> bool:
    raw_value = os.getenv("PRICE_SCRAPE_SCHEDULER_ENABLED", "true")
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    _verify_database()
    if not _scheduler_enabled():
        logger.info("Scheduler disabled by PRICE_SCRAPE_SCHEDULER_ENABLED")
        yield
        return

    from pricewatch.scheduler.jobs import build_scheduler

    scheduler = build_scheduler()
    scheduler.start()
    logger.info("Scheduler started with jobs: %s", ", ".join(job.id for job in scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler shut down")


def create_app() -> FastAPI:
    _validate_env()
    _configure_logging()

    from pricewatch.api.routers import price_scraping_router

    application = FastAPI(title="Pricewatch API", version="1.0.0", lifespan=_lifespan)
    application.include_router(price_scraping_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
