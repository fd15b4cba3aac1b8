# relevance_engine/scheduler.py
"""
Background Task Scheduler

Uses APScheduler to run the periodic relevance jobs:
- Hourly relevance refresh (tagging pass, then scoring)
- Daily learning pipeline over completed campaigns
- Weekly decay of stale learned affinities
- Daily filter-log retention cleanup

Single-instance friendly; a run that dies midway is simply redone at the
next interval.
"""
from apscheduler.schedulers.background import BackgroundScheduler
import logging

from relevance_engine.db_retry import cleanup_db_session

logger = logging.getLogger(__name__)
scheduler = None


def init_scheduler(app):
    """
    Initialize the APScheduler with Flask app context
    """
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already initialized")
        return scheduler

    scheduler = BackgroundScheduler()

    @scheduler.scheduled_job('interval', hours=1, id='refresh_relevance', max_instances=1, coalesce=True)
    def refresh_relevance_job():
        """
        Tag new/changed trends and recompute relevance for active organizations.
        Runs hourly.
        """
        with app.app_context():
            from relevance_engine.relevance.batch import refresh_relevance
            try:
                run = refresh_relevance()
                logger.info(f"Scheduled relevance refresh finished: run {run.id} {run.status}")
            except Exception as e:
                logger.error(f"Scheduled relevance refresh failed: {e}", exc_info=True)
            finally:
                cleanup_db_session()

    @scheduler.scheduled_job('cron', hour=4, id='run_learning_pipeline', max_instances=1, coalesce=True)
    def learning_job():
        """
        Correlate completed campaigns with trends and update affinities.
        Runs daily at 4 AM.
        """
        with app.app_context():
            from relevance_engine.relevance.feedback import run_learning_pipeline
            try:
                run_learning_pipeline(
                    lookback_days=app.config.get('FEEDBACK_LOOKBACK_DAYS', 7),
                    batch_size=app.config.get('FEEDBACK_BATCH_SIZE', 50),
                )
            except Exception as e:
                logger.error(f"Learning pipeline failed: {e}", exc_info=True)
            finally:
                cleanup_db_session()

    @scheduler.scheduled_job('cron', day_of_week='sun', hour=5, id='decay_affinities', max_instances=1, coalesce=True)
    def decay_job():
        """
        Attenuate learned affinities not reinforced for 30 days.
        Runs weekly on Sunday at 5 AM.
        """
        with app.app_context():
            from relevance_engine.relevance.decay import decay_stale_affinities
            try:
                decay_stale_affinities()
            except Exception as e:
                logger.error(f"Affinity decay failed: {e}", exc_info=True)
            finally:
                cleanup_db_session()

    @scheduler.scheduled_job('cron', hour=3, id='cleanup_filter_logs')
    def cleanup_filter_logs_job():
        """
        Drop filter-log entries past the retention window.
        Runs daily at 3 AM.
        """
        with app.app_context():
            from relevance_engine.relevance.store import cleanup_filter_logs
            try:
                cleanup_filter_logs(app.config.get('FILTER_LOG_RETENTION_DAYS', 30))
            except Exception as e:
                logger.error(f"Filter log cleanup failed: {e}", exc_info=True)
            finally:
                cleanup_db_session()

    logger.info("Scheduler initialized with relevance jobs")
    return scheduler


def start_scheduler():
    """
    Start the scheduler
    Should be called after app initialization
    """
    global scheduler

    if scheduler is None:
        logger.error("Scheduler not initialized. Call init_scheduler() first.")
        return

    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started")
    else:
        logger.warning("Scheduler already running")
