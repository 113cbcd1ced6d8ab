# services/laundry-service/src/apps/core/tasks.py
"""
Laundry Service Celery Tasks

Periodic maintenance of the booking table.
"""

import logging

from celery import shared_task
from django.conf import settings

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3)
def forfeit_unclaimed_bookings(self):
    """
    Release bookings whose owner never claimed the machine.

    Scheduled every minute by celery beat; does nothing unless
    ``LAUNDRY['FORFEIT_UNCLAIMED']`` is enabled.
    """
    if not settings.LAUNDRY['FORFEIT_UNCLAIMED']:
        return {'enabled': False, 'forfeited': 0, 'promoted': 0}

    try:
        from .services import ControlService

        results = ControlService().forfeit_unclaimed()

        promoted = sum(1 for result in results if result.promoted)
        logger.info(f"Forfeiture sweep: {len(results)} forfeited, {promoted} promoted")
        return {'enabled': True, 'forfeited': len(results), 'promoted': promoted}

    except Exception as e:
        logger.error(f"Error forfeiting unclaimed bookings: {e}")
        raise self.retry(countdown=30, exc=e)
