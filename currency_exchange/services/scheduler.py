"""Scheduler setup for periodic rate refresh."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

if TYPE_CHECKING:  # pragma: no cover
    from .rates_service import RatesService

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "refresh_rates"


def _run_refresh(service: RatesService) -> None:
    future = service.update_rates()
    future.result()


def init_scheduler(service: RatesService, config: Any) -> BackgroundScheduler | None:
    """Start an APScheduler interval job refreshing rates, if enabled."""

    if not getattr(config, "SCHEDULER_ENABLED", False):
        logger.info("Scheduler disabled via configuration.")
        return None

    if service.scheduler is not None:
        return service.scheduler

    interval = int(getattr(config, "RATES_REFRESH_INTERVAL_SECONDS", 300))
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        _run_refresh,
        trigger=IntervalTrigger(seconds=interval),
        args=[service],
        id=REFRESH_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    service.scheduler = scheduler

    logger.info("APScheduler started refreshing rates every %ss", interval)
    return scheduler


def shutdown_scheduler(service: RatesService) -> None:
    scheduler = service.scheduler
    if scheduler is not None and getattr(scheduler, "running", False):
        scheduler.shutdown(wait=False)
    service.scheduler = None
