import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

logger = logging.getLogger(__name__)

scheduler: BackgroundScheduler | None = None


def cleanup_expired_tokens() -> int:
    """Delete expired verification and reset tokens.

    Returns the number of tokens deleted.
    """
    from app.database import SessionLocal
    from app.services.tokens import purge_expired_tokens

    logger.info("Running expired token cleanup...")

    db = SessionLocal()
    deleted = 0
    try:
        deleted = purge_expired_tokens(db)
        logger.info("Expired token cleanup completed")
    except Exception as e:
        logger.error(f"Expired token cleanup failed: {e}")
        db.rollback()
    finally:
        db.close()

    return deleted


def start_scheduler():
    """Start the APScheduler with the hourly token cleanup job."""
    global scheduler
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        cleanup_expired_tokens,
        CronTrigger(minute=15),
        id="cleanup_expired_tokens",
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Scheduler started with hourly expired token cleanup")


def shutdown_scheduler():
    """Shutdown the scheduler gracefully."""
    global scheduler
    if scheduler is not None:
        scheduler.shutdown(wait=False)
        scheduler = None
        logger.info("Scheduler shut down")
