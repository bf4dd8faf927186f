"""
Background polling - periodic incremental sync on an APScheduler interval job
"""

from typing import Callable

from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler

from apptrack.logging_config import get_logger
from apptrack.sync import SyncCoordinator, SyncEngine

logger = get_logger(__name__)

POLL_JOB_ID = "apptrack-poll"


def poll_once(coordinator: SyncCoordinator, engine_factory: Callable[[], SyncEngine]) -> None:
    """
    One poll tick: run a sync pass and report new applications.

    A failing pass is logged; the stored applications from the last good
    pass stay in place and the next tick tries again.
    """
    try:
        result = coordinator.run_once(engine_factory())
    except Exception as e:
        logger.error(f"Scheduled sync failed: {e}")
        return

    if result is None:
        return
    if result.mode == "incremental" and result.new_records:
        count = len(result.new_records)
        logger.info(f"New Job Applications: You have {count} new job application{'s' if count > 1 else ''}")


def start_poller(
    coordinator: SyncCoordinator,
    engine_factory: Callable[[], SyncEngine],
    interval_minutes: int = 5,
) -> BackgroundScheduler:
    """
    Start polling the mailbox every interval_minutes.

    max_instances=1 keeps ticks from overlapping when a pass outlasts the
    interval; the coordinator's own guard covers manual syncs as well.

    Returns:
        The running scheduler (call shutdown() to stop it)
    """
    scheduler = BackgroundScheduler(
        jobstores={"default": MemoryJobStore()},
        job_defaults={"coalesce": True, "max_instances": 1},
    )
    scheduler.add_job(
        poll_once,
        "interval",
        minutes=interval_minutes,
        args=[coordinator, engine_factory],
        id=POLL_JOB_ID,
        replace_existing=True,
    )
    scheduler.start()
    logger.info(f"Mailbox polling every {interval_minutes} minutes")
    return scheduler
