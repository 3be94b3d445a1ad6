import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def reconcile_allocations_task(discard_manual=False):
    """Periodic / on-demand FIFO rebuild of every vendor's allocations."""
    # import lazily to avoid circular imports at module import time
    from .services.reconcile import reconcile_allocations

    summary = reconcile_allocations(discard_manual=discard_manual)
    logger.info("reconcile_allocations_task finished: %s", summary)
    # plain dict so the json result backend can store it
    return {
        "vendors": summary.vendors,
        "allocations_created": summary.allocations_created,
        "manual_discarded": summary.manual_discarded,
        "payments_updated": summary.payments_updated,
    }
