"""
Celery tasks for derived document generation.

Tasks:
- generate_missing_documents: retry invoice/vendor bill generation for
  CONFIRMED orders that have none (e.g. generation failed right after
  confirmation). Scheduled by Celery beat, see CELERY_BEAT_SCHEDULE.
"""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(bind=True)
def generate_missing_documents(self, limit: int = 500) -> dict:
    """
    Generate missing documents for confirmed orders.

    Returns:
        {"created": [document numbers], "failed": [order numbers]}
    """
    from trading.derivation import generate_missing_documents as _generate

    logger.info("Retrying generation of missing invoices/vendor bills")
    return _generate(limit=limit)
