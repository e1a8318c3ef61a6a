"""
Cron wiring for the background jobs. One BackgroundScheduler per process;
run gunicorn with a single worker so only one instance fires.
"""
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from utils.auto_checkout import run_auto_checkout
from utils.checkin_reminders import run_checkin_reminders, run_end_of_day_absence

logger = logging.getLogger(__name__)

AUTO_CHECKOUT_CRON = "59 23 * * *"
CHECKIN_REMINDER_CRON = "0 8-10 * * mon-fri"
END_OF_DAY_CRON = "0 20 * * mon-fri"

JOBS = (
    ('auto_checkout', AUTO_CHECKOUT_CRON, run_auto_checkout),
    ('checkin_reminders', CHECKIN_REMINDER_CRON, run_checkin_reminders),
    ('end_of_day_absence', END_OF_DAY_CRON, run_end_of_day_absence),
)


def _in_app_context(app, job_id, func):
    def runner():
        with app.app_context():
            try:
                func()
            except Exception as e:
                logger.error("Scheduled job %s failed: %s", job_id, e, exc_info=True)
    runner.__name__ = f"{job_id}_runner"
    return runner


def build_scheduler(app):
    """Create a scheduler with all jobs registered (not started)."""
    timezone = app.config.get('APP_TIMEZONE', 'Asia/Kolkata')
    scheduler = BackgroundScheduler(timezone=timezone)
    for job_id, expr, func in JOBS:
        scheduler.add_job(
            _in_app_context(app, job_id, func),
            CronTrigger.from_crontab(expr, timezone=timezone),
            id=job_id,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
    return scheduler


def init_scheduler(app):
    """Start the background jobs when SCHEDULER_ENABLED is set."""
    if not app.config.get('SCHEDULER_ENABLED'):
        return None
    if 'scheduler' in app.extensions:
        return app.extensions['scheduler']
    scheduler = build_scheduler(app)
    scheduler.start()
    app.extensions['scheduler'] = scheduler
    logger.info("Scheduler started with jobs: %s", ', '.join(job_id for job_id, _, _ in JOBS))
    return scheduler
