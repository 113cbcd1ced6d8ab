# services/laundry-service/src/apps/core/services/control_service.py
"""
Control Service

Live status for display and the privileged operations of hostel admins:
force release, queue bypass and the no-show sweep.
"""

import uuid
import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from django.conf import settings
from django.utils import timezone

from apps.core.models import Booking, Resource
from .booking_service import BookingService, ReleaseResult
from .exceptions import OrchestratorError
from .live_status import ResourceStatus, derive_live_status
from .resource_service import ResourceService

logger = logging.getLogger(__name__)


class ControlService:
    """
    Admin control plane.

    Handles:
    - Live status per resource
    - Force release (idempotent)
    - Direct assignment ignoring the waitlist
    - Forfeiture of unclaimed bookings
    """

    def __init__(
        self,
        booking_service: BookingService = None,
        resource_service: ResourceService = None
    ):
        self.booking_service = booking_service or BookingService()
        self.resource_service = resource_service or ResourceService()

    @property
    def grid(self):
        return self.booking_service.grid

    # ==========================================================================
    # Live Status
    # ==========================================================================

    def get_live_status(self, resource_id: uuid.UUID) -> Tuple[Resource, ResourceStatus]:
        resource = self.resource_service.get_resource(resource_id)
        now = timezone.now()
        bookings = self._todays_bookings([resource.id], now)
        return resource, derive_live_status(resource, bookings, now, self.grid)

    def list_with_status(
        self,
        hostel_id: uuid.UUID,
        resource_type: str = None
    ) -> List[Tuple[Resource, ResourceStatus]]:
        """All resources of a hostel paired with their live status."""
        resources = self.resource_service.list_by_hostel(hostel_id, resource_type)
        now = timezone.now()

        by_resource = defaultdict(list)
        for booking in self._todays_bookings([r.id for r in resources], now):
            by_resource[booking.resource_id].append(booking)

        return [
            (resource, derive_live_status(resource, by_resource[resource.id], now, self.grid))
            for resource in resources
        ]

    def _todays_bookings(self, resource_ids, now: datetime) -> List[Booking]:
        opens, closes = self.grid.day_bounds(self.grid.local_date(now))
        return list(
            Booking.objects.filter(
                resource_id__in=resource_ids,
                status=Booking.Status.CONFIRMED,
                start_time__lt=closes,
                end_time__gt=opens,
            ).order_by('start_time')
        )

    # ==========================================================================
    # Admin Operations
    # ==========================================================================

    def force_release(self, booking_id: uuid.UUID, admin_id: uuid.UUID) -> ReleaseResult:
        """
        Cancel any user's booking and promote the waitlist into its window.

        Releasing an already cancelled booking is a no-op.
        """
        booking = self.booking_service.get_booking(booking_id)

        if booking.status == Booking.Status.CANCELLED:
            logger.info(f"Force release of {booking.id} ignored: already cancelled")
            return ReleaseResult(booking=booking, already_released=True)

        result = self.booking_service.release(
            booking,
            cancelled_by=admin_id,
            cancellation_type=Booking.CancellationType.ADMIN,
            idempotent=True,
        )

        if not result.already_released:
            logger.info(f"Admin {admin_id} force released booking {booking.id}")

        return result

    def bypass_queue(
        self,
        user_id: uuid.UUID,
        resource_id: uuid.UUID,
        start_time: datetime,
        end_time: datetime,
        admin_id: uuid.UUID
    ) -> Booking:
        """Assign a slot directly; the waitlist is neither read nor changed."""
        booking = self.booking_service.create_booking(
            resource_id,
            user_id,
            start_time,
            end_time,
            origin=Booking.Origin.BYPASS,
            created_by=admin_id,
            allow_started=True,
        )

        logger.info(f"Admin {admin_id} assigned booking {booking.id} to {user_id}")
        return booking

    def active_bookings(self, hostel_id: uuid.UUID) -> List[Booking]:
        """Bookings of a hostel that have not ended yet."""
        return list(
            Booking.objects.filter(
                resource__hostel_id=hostel_id,
                status=Booking.Status.CONFIRMED,
                end_time__gt=timezone.now(),
            ).select_related('resource').order_by('start_time')
        )

    # ==========================================================================
    # No-show Sweep
    # ==========================================================================

    def forfeit_unclaimed(self, now: Optional[datetime] = None) -> List[ReleaseResult]:
        """
        Cancel running bookings nobody claimed within the grace period.

        A booking is only forfeited once both its start and its creation are
        older than the grace period, so late bypass assignments get the full
        window to be claimed.
        """
        now = now or timezone.now()
        cutoff = now - timedelta(minutes=settings.LAUNDRY['NO_SHOW_GRACE_MINUTES'])

        candidates = Booking.objects.filter(
            status=Booking.Status.CONFIRMED,
            claimed_at__isnull=True,
            start_time__lte=cutoff,
            created_at__lte=cutoff,
            end_time__gt=now,
        ).select_related('resource')

        results = []
        for booking in list(candidates):
            try:
                result = self.booking_service.release(
                    booking,
                    cancellation_type=Booking.CancellationType.FORFEITED,
                    idempotent=True,
                )
            except OrchestratorError as e:
                logger.warning(f"Could not forfeit booking {booking.id}: {e.message}")
                continue

            if not result.already_released:
                results.append(result)

        if results:
            logger.info(f"Forfeited {len(results)} unclaimed bookings")

        return results
