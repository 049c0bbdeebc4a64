import logging

from celery import shared_task

from .services.recurring import RecurringObligationService

logger = logging.getLogger(__name__)


@shared_task
def process_recurring_transactions():
    """Create transactions for every due recurring template."""
    report = RecurringObligationService().execute_pending_recurring_transactions()
    logger.info(f"Scheduled recurring run created {report.count} transaction(s)")
    return {"count": report.count, "failures": report.failures}
