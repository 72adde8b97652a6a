"""
pricewatch/scheduler/jobs.py

APScheduler-based schedule for periodic competitor price scraping.

Schedule (all times UTC)
--------------------------
  price_scrape_morning: 06:00 every day
  price_scrape_evening: 18:00 every day

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from db.session import session_scope
from pricewatch.services.price_scraping_service import get_price_scraping_service

logger = logging.getLogger(__name__)

SCRAPE_HOURS_UTC: tuple[int, ...] = (6, 18)


def run_price_scrape() -> None:
    """
    Scrape every active competitor URL once.

    Failures are logged; the scheduler keeps running.
    """
    logger.info("Scheduler: price_scrape starting")
    try:
        with session_scope() as db:
            summary = get_price_scraping_service().run(db=db)
    except Exception as exc:  # noqa: BLE001
        logger.error("Scheduler: price_scrape failed: %s", exc)
        return

    logger.info(
        "Scheduler: price_scrape complete total=%d succeeded=%d failed=%d",
        summary.total,
        summary.succeeded,
        summary.failed,
    )


def build_scheduler() -> BackgroundScheduler:
    """
    Build and register the scrape jobs.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    """
    scheduler = BackgroundScheduler(timezone="UTC")

    for hour in SCRAPE_HOURS_UTC:
        label = "morning" if hour < 12 else "evening"
        scheduler.add_job(
            run_price_scrape,
            trigger="cron",
            hour=hour,
            minute=0,
            id=f"price_scrape_{label}",
            name=f"Competitor price scrape ({hour:02d}:00 UTC)",
            replace_existing=True,
            misfire_grace_time=3600,
            max_instances=1,
            coalesce=True,
        )

    return scheduler
