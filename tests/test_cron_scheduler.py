from __future__ import annotations

from datetime import datetime, time
from zoneinfo import ZoneInfo

from adapters.cron_scheduler import PERIODIC_JOB_ID, build_cron_trigger, build_scheduler
from core.config import SchedulerConfig

LONDON = ZoneInfo("Europe/London")


def _config(run_time: time = time(6, 0), tz_name: str | None = "Europe/London") -> SchedulerConfig:
    return SchedulerConfig(run_time=run_time, timezone=tz_name, misfire_grace_seconds=900)


def test_cron_trigger_fires_at_run_time_in_site_zone() -> None:
    trigger = build_cron_trigger(_config())

    after_run = datetime(2024, 1, 10, 7, 0, tzinfo=LONDON)
    before_run = datetime(2024, 1, 10, 5, 59, tzinfo=LONDON)

    assert trigger.get_next_fire_time(None, after_run) == datetime(2024, 1, 11, 6, 0, tzinfo=LONDON)
    assert trigger.get_next_fire_time(None, before_run) == datetime(2024, 1, 10, 6, 0, tzinfo=LONDON)


def test_cron_trigger_follows_daylight_saving() -> None:
    trigger = build_cron_trigger(_config(run_time=time(6, 30)))

    summer = trigger.get_next_fire_time(None, datetime(2024, 7, 1, 12, 0, tzinfo=LONDON))

    assert summer == datetime(2024, 7, 2, 6, 30, tzinfo=LONDON)
    assert summer.utcoffset().total_seconds() == 3600


def test_scheduler_registers_single_periodic_job() -> None:
    calls: list[str] = []
    scheduler = build_scheduler(lambda: calls.append("tick"), _config(), catch_up=False)

    jobs = scheduler.get_jobs()

    assert [job.id for job in jobs] == [PERIODIC_JOB_ID]
    assert jobs[0].misfire_grace_time == 900
    assert jobs[0].coalesce is True
    assert jobs[0].max_instances == 1
    assert calls == []
