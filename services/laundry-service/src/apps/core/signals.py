# services/laundry-service/src/apps/core/signals.py
"""
Django Signals for Laundry Service

Turn model state changes into published events.
"""

import logging
from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from .models import Booking, Resource, WaitlistEntry
from .events import (
    publish_booking_created,
    publish_booking_cancelled,
    publish_booking_claimed,
    publish_waitlist_joined,
    publish_waitlist_left,
    publish_waitlist_promoted,
    publish_resource_created,
    publish_resource_maintenance_changed,
)

logger = logging.getLogger(__name__)


def _previous(sender, instance, *fields):
    """Stored values of ``fields`` before this save, or None for new rows."""
    if instance._state.adding:
        return None
    return sender.objects.filter(pk=instance.pk).values(*fields).first()


# ==========================================================================
# Booking Signals
# ==========================================================================

@receiver(pre_save, sender=Booking)
def booking_pre_save(sender, instance, **kwargs):
    """Track status and claim changes before save."""
    instance._previous = _previous(sender, instance, 'status', 'claimed_at')


@receiver(post_save, sender=Booking)
def booking_post_save(sender, instance, created, **kwargs):
    """Handle booking post-save events."""
    if created:
        publish_booking_created(instance)
        return

    previous = getattr(instance, '_previous', None)
    if not previous:
        return

    if previous['status'] != instance.status and instance.status == Booking.Status.CANCELLED:
        publish_booking_cancelled(instance)
        logger.info(f"Booking cancelled: {instance.id} ({instance.cancellation_type})")

    if previous['claimed_at'] is None and instance.claimed_at is not None:
        publish_booking_claimed(instance)


# ==========================================================================
# Waitlist Signals
# ==========================================================================

@receiver(pre_save, sender=WaitlistEntry)
def waitlist_pre_save(sender, instance, **kwargs):
    instance._previous = _previous(sender, instance, 'status')


@receiver(post_save, sender=WaitlistEntry)
def waitlist_post_save(sender, instance, created, **kwargs):
    """Handle waitlist entry events."""
    if created:
        publish_waitlist_joined(instance)
        return

    previous = getattr(instance, '_previous', None)
    if not previous or previous['status'] == instance.status:
        return

    if instance.status == WaitlistEntry.Status.FULFILLED:
        publish_waitlist_promoted(instance)
        logger.info(f"Waitlist entry fulfilled: {instance.id}")
    elif instance.status == WaitlistEntry.Status.CANCELLED:
        publish_waitlist_left(instance)


# ==========================================================================
# Resource Signals
# ==========================================================================

@receiver(pre_save, sender=Resource)
def resource_pre_save(sender, instance, **kwargs):
    instance._previous = _previous(sender, instance, 'is_operational')


@receiver(post_save, sender=Resource)
def resource_post_save(sender, instance, created, **kwargs):
    """Handle resource events."""
    if created:
        publish_resource_created(instance)
        return

    previous = getattr(instance, '_previous', None)
    if previous and previous['is_operational'] != instance.is_operational:
        publish_resource_maintenance_changed(instance)
