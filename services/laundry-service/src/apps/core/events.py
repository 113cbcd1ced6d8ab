# services/laundry-service/src/apps/core/events.py
"""
Laundry Service Events

Lifecycle events for the notification dispatcher and in-process listeners.
Events leave only after the surrounding transaction commits, and a failed
delivery is logged without affecting the request that caused it.
"""

import json
import uuid
import logging
from datetime import datetime
from typing import Any, Dict, List
from uuid import UUID

import httpx
from django.conf import settings
from django.db import transaction
from django.dispatch import Signal
from django.utils import timezone

logger = logging.getLogger(__name__)


# Sent with ``event=<dict>`` for every published event
orchestrator_event = Signal()


class EventType:
    """Event type constants for laundry service."""

    # Booking lifecycle events
    BOOKING_CREATED = 'booking.created'
    BOOKING_CANCELLED = 'booking.cancelled'
    BOOKING_FORCE_RELEASED = 'booking.force_released'
    BOOKING_FORFEITED = 'booking.forfeited'
    BOOKING_CLAIMED = 'booking.claimed'

    # Waitlist events
    WAITLIST_JOINED = 'waitlist.joined'
    WAITLIST_LEFT = 'waitlist.left'
    WAITLIST_PROMOTED = 'waitlist.promoted'

    # Resource events
    RESOURCE_CREATED = 'resource.created'
    RESOURCE_MAINTENANCE_STARTED = 'resource.maintenance_started'
    RESOURCE_MAINTENANCE_CLEARED = 'resource.maintenance_cleared'


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for event payloads."""

    def default(self, obj):
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


class EventPublisher:
    """
    Event publisher for laundry service.

    Backends: ``log`` (default), ``memory`` (kept on the publisher, for
    tests) and ``webhook`` (POST to ``NOTIFICATION_WEBHOOK_URL``).
    """

    def __init__(self):
        self.service_name = 'laundry-service'
        self.published: List[Dict[str, Any]] = []

    @property
    def enabled(self) -> bool:
        return getattr(settings, 'EVENT_PUBLISHING_ENABLED', True)

    def publish(
        self,
        event_type: str,
        payload: Dict[str, Any],
        hostel_id: UUID = None,
        correlation_id: str = None
    ) -> bool:
        """
        Queue an event for delivery once the current transaction commits.

        Args:
            event_type: Type of event (e.g., 'booking.created')
            payload: Event data
            hostel_id: Hostel context
            correlation_id: Optional correlation ID for tracing

        Returns:
            True if the event was queued, False if publishing is disabled
        """
        if not self.enabled:
            logger.debug(f"Event publishing disabled, skipping: {event_type}")
            return False

        event = {
            'event_id': str(uuid.uuid4()),
            'event_type': event_type,
            'service': self.service_name,
            'timestamp': timezone.now().isoformat(),
            'hostel_id': str(hostel_id) if hostel_id else None,
            'correlation_id': correlation_id,
            'payload': payload,
        }

        transaction.on_commit(lambda: self._dispatch(event))
        return True

    def clear(self):
        self.published.clear()

    def _dispatch(self, event: Dict[str, Any]):
        event_type = event['event_type']

        try:
            event_json = json.dumps(event, cls=JSONEncoder)

            logger.info(f"Publishing event: {event_type}", extra={
                'event_type': event_type,
                'hostel_id': event['hostel_id'],
            })

            self._publish_to_backend(event, event_json)

        except Exception as e:
            logger.error(f"Failed to publish event {event_type}: {e}")

        for receiver, response in orchestrator_event.send_robust(sender=self.__class__, event=event):
            if isinstance(response, Exception):
                logger.error(f"Event listener {receiver} failed on {event_type}: {response}")

    def _publish_to_backend(self, event: Dict[str, Any], event_json: str):
        """Publish to the configured backend."""
        backend = getattr(settings, 'EVENT_BACKEND', 'log')

        if backend == 'memory':
            self.published.append(json.loads(event_json))
        elif backend == 'webhook':
            self._publish_webhook(event['event_type'], event_json)
        else:
            # Default: just log
            logger.debug(f"Event payload: {event_json[:500]}")

    def _publish_webhook(self, event_type: str, event_json: str):
        """POST the event to the notification dispatcher."""
        webhook_url = getattr(settings, 'NOTIFICATION_WEBHOOK_URL', None)
        if not webhook_url:
            return

        try:
            response = httpx.post(
                webhook_url,
                content=event_json,
                headers={'Content-Type': 'application/json', 'X-Event-Type': event_type},
                timeout=getattr(settings, 'NOTIFICATION_WEBHOOK_TIMEOUT', 5),
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Webhook publish error for {event_type}: {e}")


# Global event publisher instance
event_publisher = EventPublisher()


# ==========================================================================
# Booking Events
# ==========================================================================

def _booking_payload(booking) -> Dict[str, Any]:
    return {
        'booking_id': booking.id,
        'resource_id': booking.resource_id,
        'user_id': booking.user_id,
        'start_time': booking.start_time,
        'end_time': booking.end_time,
        'origin': booking.origin,
    }


def publish_booking_created(booking):
    """Publish booking created event."""
    event_publisher.publish(
        EventType.BOOKING_CREATED,
        payload={**_booking_payload(booking), 'created_by': booking.created_by},
        hostel_id=booking.resource.hostel_id
    )


def publish_booking_cancelled(booking):
    """Publish the release event matching how the booking was cancelled."""
    event_type = {
        booking.CancellationType.ADMIN: EventType.BOOKING_FORCE_RELEASED,
        booking.CancellationType.FORFEITED: EventType.BOOKING_FORFEITED,
    }.get(booking.cancellation_type, EventType.BOOKING_CANCELLED)

    event_publisher.publish(
        event_type,
        payload={
            **_booking_payload(booking),
            'cancelled_by': booking.cancelled_by,
            'cancellation_type': booking.cancellation_type,
            'cancelled_at': booking.cancelled_at,
        },
        hostel_id=booking.resource.hostel_id
    )


def publish_booking_claimed(booking):
    """Publish booking claimed event."""
    event_publisher.publish(
        EventType.BOOKING_CLAIMED,
        payload={**_booking_payload(booking), 'claimed_at': booking.claimed_at},
        hostel_id=booking.resource.hostel_id
    )


# ==========================================================================
# Waitlist Events
# ==========================================================================

def publish_waitlist_joined(entry):
    """Publish waitlist joined event."""
    event_publisher.publish(
        EventType.WAITLIST_JOINED,
        payload={
            'waitlist_entry_id': entry.id,
            'user_id': entry.user_id,
            'resource_type': entry.resource_type,
            'joined_at': entry.joined_at,
        },
        hostel_id=entry.hostel_id
    )


def publish_waitlist_left(entry):
    """Publish waitlist left event."""
    event_publisher.publish(
        EventType.WAITLIST_LEFT,
        payload={
            'waitlist_entry_id': entry.id,
            'user_id': entry.user_id,
            'resource_type': entry.resource_type,
        },
        hostel_id=entry.hostel_id
    )


def publish_waitlist_promoted(entry):
    """Publish promotion event; the dispatcher notifies the promoted user."""
    booking = entry.fulfilled_booking
    event_publisher.publish(
        EventType.WAITLIST_PROMOTED,
        payload={
            'waitlist_entry_id': entry.id,
            'user_id': entry.user_id,
            'resource_type': entry.resource_type,
            'booking_id': booking.id if booking else None,
            'resource_id': booking.resource_id if booking else None,
            'start_time': booking.start_time if booking else None,
            'end_time': booking.end_time if booking else None,
            'joined_at': entry.joined_at,
            'fulfilled_at': entry.fulfilled_at,
        },
        hostel_id=entry.hostel_id
    )


# ==========================================================================
# Resource Events
# ==========================================================================

def publish_resource_created(resource):
    """Publish resource created event."""
    event_publisher.publish(
        EventType.RESOURCE_CREATED,
        payload={
            'resource_id': resource.id,
            'name': resource.name,
            'resource_type': resource.resource_type,
            'created_by': resource.created_by,
        },
        hostel_id=resource.hostel_id
    )


def publish_resource_maintenance_changed(resource):
    """Publish maintenance started or cleared."""
    event_type = (
        EventType.RESOURCE_MAINTENANCE_CLEARED if resource.is_operational
        else EventType.RESOURCE_MAINTENANCE_STARTED
    )
    event_publisher.publish(
        event_type,
        payload={
            'resource_id': resource.id,
            'name': resource.name,
            'is_operational': resource.is_operational,
            'maintenance_reason': resource.maintenance_reason,
        },
        hostel_id=resource.hostel_id
    )
