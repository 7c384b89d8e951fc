"""Scheduler setup for periodic sweeping of expired rate cache entries."""

from __future__ import annotations

import atexit
import logging
from typing import Any, cast

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from flask import Flask

from money_calculator.services.rate_cache import CACHE_EXT_KEY, CachedRateProvider
from money_calculator.utils.datetime import utc_now

logger = logging.getLogger(__name__)

SCHEDULER_EXT_KEY = "apscheduler"
SWEEP_STATE_KEY = "cache_sweep_state"
SWEEP_JOB_ID = "sweep_rate_cache"


def ensure_sweep_state(app: Flask) -> dict[str, Any]:
    """Ensure sweep state dict exists on app extensions."""
    state = app.extensions.setdefault(SWEEP_STATE_KEY, {})
    if not isinstance(state, dict):
        new_state: dict[str, Any] = {}
        app.extensions[SWEEP_STATE_KEY] = new_state
        return new_state
    return state


def run_sweep(app: Flask) -> int | None:
    """Sweep the app's rate cache once and record the outcome."""

    cache = cast(CachedRateProvider | None, app.extensions.get(CACHE_EXT_KEY))
    if cache is None:
        logger.warning("No rate cache configured; skipping scheduled sweep.")
        return None

    removed = cache.sweep_expired()
    state = ensure_sweep_state(app)
    state["last_sweep"] = utc_now()
    state["last_removed"] = removed
    logger.debug("Scheduled cache sweep removed %s entries", removed)
    return removed


def init_scheduler(app: Flask) -> BackgroundScheduler | None:
    """Initialise APScheduler with the periodic sweep job if enabled."""

    ensure_sweep_state(app)

    if not app.config.get("CACHE_SWEEP_ENABLED", True):
        logger.info("Cache sweep scheduler disabled via configuration.")
        return None

    if app.extensions.get(SCHEDULER_EXT_KEY):
        return app.extensions[SCHEDULER_EXT_KEY]

    scheduler = BackgroundScheduler(timezone=app.config.get("SCHEDULER_TIMEZONE", "UTC"))
    cron_expr = app.config.get("CACHE_SWEEP_CRON", "*/10 * * * *")
    trigger = CronTrigger.from_crontab(cron_expr)
    scheduler.add_job(run_sweep, trigger=trigger, args=[app], id=SWEEP_JOB_ID, replace_existing=True)
    scheduler.start()

    app.extensions[SCHEDULER_EXT_KEY] = scheduler
    atexit.register(shutdown_scheduler, app)
    logger.info("APScheduler started with cron '%s'", cron_expr)
    return scheduler


def shutdown_scheduler(app: Flask) -> None:
    """Stop the sweep scheduler if one is running."""

    sched = app.extensions.pop(SCHEDULER_EXT_KEY, None)
    if sched and getattr(sched, "running", False):
        sched.shutdown(wait=False)
