"""Background scheduler for periodic counter reconciliation.

Supports two modes:
  - **Standalone** (``python -m src.scheduler``): runs a ``BlockingScheduler``
    as a separate worker process.
  - **Embedded** (``create_background_scheduler()``): returns a
    ``BackgroundScheduler`` that the FastAPI process starts in its
    ``lifespan`` handler when ``scheduler.enabled`` is set.
"""

import sys
import signal
from datetime import datetime, timedelta

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .services.reconciliation_service import ReconciliationService
from .utils.config import get_config
from .utils.logger import get_reconcile_logger, get_scheduler_logger

JOB_ID = "counter_reconciliation"
JOB_NAME = "Stock and debt counter reconciliation"


# ------------------------------------------------------------------
# Shared job factory
# ------------------------------------------------------------------

def _make_reconcile_job(service: ReconciliationService = None):
    """Create and return the reconciliation-job callable."""
    config = get_config()
    logger = get_reconcile_logger()
    service = service or ReconciliationService()

    def reconcile_job():
        logger.info(f"Scheduled reconciliation started at {datetime.now()}")

        try:
            result = service.reconcile(
                fix=config.scheduler.auto_fix,
                apply_pending=config.scheduler.apply_pending
            )

            if result.drift_count and not config.scheduler.auto_fix:
                logger.warning(
                    f"{result.drift_count} counter(s) drifted; run `reconcile --fix` to repair"
                )
            if not result.success:
                logger.warning(f"Reconciliation completed with {len(result.errors)} errors")

        except Exception as e:
            logger.error(f"Reconciliation job failed with exception: {str(e)}", exc_info=True)

    return reconcile_job


def _add_interval_job(scheduler, job, interval_minutes: int) -> None:
    config = get_config()
    scheduler.add_job(
        func=job,
        trigger=IntervalTrigger(minutes=interval_minutes),
        id=JOB_ID,
        name=JOB_NAME,
        max_instances=config.scheduler.max_instances,
        coalesce=config.scheduler.coalesce,
        misfire_grace_time=config.scheduler.misfire_grace_time,
        replace_existing=True
    )


# ------------------------------------------------------------------
# Embedded (non-blocking) scheduler, used by the web process
# ------------------------------------------------------------------

def create_background_scheduler() -> BackgroundScheduler:
    """Create a ``BackgroundScheduler`` for embedding inside FastAPI.

    The scheduler is returned **not started**; the caller must invoke
    ``scheduler.start()``. A first run is scheduled 15 seconds after
    creation so the web server can finish its startup first.
    """
    config = get_config()
    logger = get_reconcile_logger()
    get_scheduler_logger()
    interval = config.env.reconcile_interval_minutes

    scheduler = BackgroundScheduler(timezone=config.scheduler.timezone)
    job = _make_reconcile_job()

    _add_interval_job(scheduler, job, interval)
    scheduler.add_job(
        func=job,
        trigger="date",
        run_date=datetime.now() + timedelta(seconds=15),
        id="initial_reconciliation",
        name="Initial reconciliation on startup",
    )

    logger.info(
        f"Background scheduler configured: reconcile every {interval} min "
        f"(initial run in ~15 s, auto_fix={config.scheduler.auto_fix})"
    )
    return scheduler


# ------------------------------------------------------------------
# Standalone (blocking) scheduler
# ------------------------------------------------------------------

class ReconcileScheduler:
    """Scheduler for periodic reconciliation in its own process."""

    def __init__(self):
        self.config = get_config()
        self.logger = get_reconcile_logger()
        get_scheduler_logger()
        self.reconcile_job = _make_reconcile_job()

        self.scheduler = BlockingScheduler(
            timezone=self.config.scheduler.timezone
        )

        signal.signal(signal.SIGINT, self._shutdown_handler)
        signal.signal(signal.SIGTERM, self._shutdown_handler)

    def _shutdown_handler(self, signum, frame):
        self.logger.info(f"Received shutdown signal ({signum}). Stopping scheduler...")
        self.scheduler.shutdown(wait=True)
        sys.exit(0)

    def start(self):
        """Start the blocking scheduler (runs forever)."""
        interval = self.config.env.reconcile_interval_minutes

        self.logger.info("=" * 70)
        self.logger.info("Reconciliation Scheduler Starting (standalone)")
        self.logger.info("=" * 70)
        self.logger.info(f"Environment:      {self.config.env.environment}")
        self.logger.info(f"Timezone:         {self.config.scheduler.timezone}")
        self.logger.info(f"Interval:         {interval} minutes")
        self.logger.info(f"Auto fix:         {self.config.scheduler.auto_fix}")
        self.logger.info(f"Apply pending:    {self.config.scheduler.apply_pending}")
        self.logger.info("=" * 70)

        _add_interval_job(self.scheduler, self.reconcile_job, interval)

        self.logger.info("Running initial reconciliation...")
        self.reconcile_job()

        self.logger.info("Scheduler started. Press Ctrl+C to stop.")

        try:
            self.scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            self.logger.info("Scheduler stopped.")


def main():
    """Main entry point for standalone scheduler."""
    try:
        scheduler = ReconcileScheduler()
        scheduler.start()
    except Exception as e:
        logger = get_reconcile_logger()
        logger.error(f"Scheduler failed to start: {str(e)}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
