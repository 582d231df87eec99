# activity_sessions/scheduler.py
"""
Background task scheduler for session upkeep.

Uses APScheduler to run periodic background jobs for:
- Materializing sessions on a rolling horizon
- Completing past sessions and purging old ones
- Queuing reminders and draining the notification outbox
"""

import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED

from activity_sessions.background_tasks.session_tasks import (
    cleanup_old_sessions_task,
    complete_past_sessions_task,
    dispatch_notifications_task,
    generate_upcoming_sessions_task,
    session_reminders_task,
)

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None

# (id, name, task, trigger, human-readable cadence)
_JOBS = [
    ('generate_upcoming_sessions', 'Materialize Upcoming Sessions',
     generate_upcoming_sessions_task, CronTrigger(hour=0, minute=5), "daily at 00:05"),
    ('complete_past_sessions', 'Mark Past Sessions Completed',
     complete_past_sessions_task, IntervalTrigger(hours=1), "every 1 hour"),
    ('cleanup_old_sessions', 'Delete Old Completed Sessions',
     cleanup_old_sessions_task, CronTrigger(hour=3, minute=0), "daily at 03:00"),
    ('session_reminders', 'Queue Session Reminders',
     session_reminders_task, IntervalTrigger(hours=1), "every 1 hour"),
    ('dispatch_notifications', 'Dispatch Notification Outbox',
     dispatch_notifications_task, IntervalTrigger(minutes=1), "every 1 minute"),
]


def _on_job_error(event):
    """Log scheduler job errors with full context."""
    exc = event.exception
    logger.error(
        "Scheduled job FAILED: job_id=%s error=%s",
        event.job_id, exc,
        exc_info=(type(exc), exc, None) if exc else None,
    )
    if event.traceback:
        logger.error("Traceback for job %s:\n%s", event.job_id, event.traceback)


def _on_job_missed(event):
    logger.warning(
        "Scheduled job MISSED: job_id=%s scheduled_run_time=%s",
        event.job_id,
        event.scheduled_run_time,
    )


def init_scheduler():
    """
    Initialize the background scheduler with all periodic tasks.

    Session dates are naive local time, so the scheduler runs in the host's
    local timezone.
    """
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already initialized")
        return scheduler

    scheduler = BackgroundScheduler(
        job_defaults={
            'coalesce': True,
            'max_instances': 1,
            'misfire_grace_time': 60
        }
    )

    for job_id, name, func, trigger, when in _JOBS:
        scheduler.add_job(
            func=func,
            trigger=trigger,
            id=job_id,
            name=name,
            replace_existing=True
        )
        logger.info(f"Scheduled job: {job_id} ({when})")

    scheduler.add_listener(_on_job_error, EVENT_JOB_ERROR)
    scheduler.add_listener(_on_job_missed, EVENT_JOB_MISSED)

    scheduler.start()
    logger.info("Background scheduler started successfully")

    return scheduler


def shutdown_scheduler():
    global scheduler

    if scheduler is not None:
        scheduler.shutdown(wait=True)
        logger.info("Background scheduler shutdown complete")
        scheduler = None


def get_scheduler_status():
    """
    Get the current status of all scheduled jobs.

    Returns:
        Dict with scheduler state and per-job next run time
    """
    if scheduler is None:
        return {"status": "not_initialized", "jobs": []}

    jobs = []
    for job in scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
            "trigger": str(job.trigger)
        })

    return {
        "status": "running" if scheduler.running else "stopped",
        "jobs": jobs
    }
