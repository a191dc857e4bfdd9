"""APScheduler wiring for the daily periodic trigger.

The cron trigger fires once a day at the configured run time; the job itself
still goes through the daily gate, so a startup catch-up run or a coalesced
misfire never sends twice for the same day.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from core.config import SchedulerConfig

LOGGER = logging.getLogger(__name__)

PERIODIC_JOB_ID = "periodic-notification-pass"


def build_cron_trigger(config: SchedulerConfig) -> CronTrigger:
    """Daily trigger at run_time in the configured zone (host local zone when unset)."""

    return CronTrigger(
        hour=config.run_time.hour,
        minute=config.run_time.minute,
        timezone=config.timezone or None,
    )


def build_scheduler(job: Callable[[], None], config: SchedulerConfig, catch_up: bool = True) -> BlockingScheduler:
    """Create a blocking scheduler with the periodic job registered.

    With ``catch_up`` the job also runs once right after start, so a run time
    missed while the process was down is served as soon as it comes back.
    """

    if config.timezone:
        scheduler = BlockingScheduler(timezone=config.timezone)
    else:
        scheduler = BlockingScheduler()

    job_options = {}
    if catch_up:
        job_options["next_run_time"] = datetime.now(timezone.utc)

    scheduler.add_job(
        func=job,
        trigger=build_cron_trigger(config),
        id=PERIODIC_JOB_ID,
        name="Daily notification pass",
        misfire_grace_time=config.misfire_grace_seconds,
        coalesce=True,
        max_instances=1,
        **job_options,
    )
    LOGGER.debug(
        "Scheduled %s daily at %s (%s)",
        PERIODIC_JOB_ID,
        config.run_time.strftime("%H:%M"),
        config.timezone or "local time",
    )
    return scheduler
