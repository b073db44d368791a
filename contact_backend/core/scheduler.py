"""
One-shot delayed jobs on the application's event loop.

The MongoDB connector schedules its next connection attempt here, so a retry
never blocks request handling and can be cancelled on shutdown.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.executors.asyncio import AsyncIOExecutor
import logging

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler(
    jobstores={'default': MemoryJobStore()},
    executors={'default': AsyncIOExecutor()},
    job_defaults={
        'max_instances': 1,         # one reconnect attempt in flight at a time
        'misfire_grace_time': None  # a late retry still runs
    },
    timezone='UTC'
)


def init_scheduler():
    """Start the scheduler on the running event loop."""
    if scheduler.running:
        return
    try:
        scheduler.start()
        logger.info("Retry scheduler started")
    except Exception as e:
        logger.error(f"❌ Could not start retry scheduler: {str(e)}")


def schedule_at(job_id, func, run_date):
    """
    Run ``func`` once at ``run_date``, replacing any pending job with the same id.

    Returns:
        bool: True if the job was scheduled
    """
    try:
        scheduler.add_job(func=func, trigger="date", run_date=run_date, id=job_id, replace_existing=True)
    except Exception as e:
        logger.error(f"❌ Could not schedule {job_id}: {str(e)}")
        return False
    logger.debug(f"{job_id} scheduled for {run_date.isoformat()}")
    return True


def is_scheduled(job_id):
    return scheduler.get_job(job_id) is not None


def cancel(job_id):
    """Drop a pending job; a job that already ran or never existed is ignored."""
    if not is_scheduled(job_id):
        return False
    scheduler.remove_job(job_id)
    logger.info(f"Cancelled pending {job_id}")
    return True


def shutdown():
    """Stop the scheduler without waiting for pending jobs."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Retry scheduler stopped")
