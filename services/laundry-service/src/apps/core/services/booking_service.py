# services/laundry-service/src/apps/core/services/booking_service.py
"""
Booking Service

Slot availability and the booking lifecycle: book, cancel, claim.
"""

import uuid
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, List

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.models import Booking, Resource
from .exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ResourceUnavailableError,
    SlotTakenError,
    ValidationError,
)
from .slots import AvailableSlots, SlotGrid

logger = logging.getLogger(__name__)


@dataclass
class ReleaseResult:
    """Outcome of freeing a booking's slot."""

    booking: Booking
    promoted: Optional[Booking] = None
    already_released: bool = False


class BookingService:
    """
    Service for managing bookings.

    Handles:
    - Available slot computation
    - Race-safe booking creation
    - Cancellation with waitlist promotion
    - Claiming (check-in) of started bookings
    """

    def __init__(self, grid: SlotGrid = None):
        self.grid = grid or SlotGrid.from_settings()

    @property
    def waitlist_service(self):
        from .waitlist_service import WaitlistService
        return WaitlistService(booking_service=self)

    # ==========================================================================
    # Availability
    # ==========================================================================

    def get_available_slots(
        self,
        resource_id: uuid.UUID,
        target_date: date = None
    ) -> AvailableSlots:
        """Free slots of a resource on ``target_date`` (default: today)."""
        resource = self._get_resource(resource_id)
        day = target_date or self.grid.today()
        opens, closes = self.grid.day_bounds(day)

        booked = Booking.get_for_window(resource.id, opens, closes).values_list(
            'start_time', 'end_time'
        )

        return AvailableSlots(
            self.grid,
            day,
            booked=list(booked),
            now=timezone.now(),
            closed=not resource.is_operational,
        )

    # ==========================================================================
    # Booking CRUD
    # ==========================================================================

    def book_slot(
        self,
        resource_id: uuid.UUID,
        user_id: uuid.UUID,
        start_time: datetime,
        end_time: datetime
    ) -> Booking:
        """Reserve one slot for the requesting user."""
        return self.create_booking(
            resource_id,
            user_id,
            start_time,
            end_time,
            origin=Booking.Origin.DIRECT,
            created_by=user_id,
        )

    @transaction.atomic
    def create_booking(
        self,
        resource_id: uuid.UUID,
        user_id: uuid.UUID,
        start_time: datetime,
        end_time: datetime,
        origin: str = Booking.Origin.DIRECT,
        created_by: uuid.UUID = None,
        allow_started: bool = False
    ) -> Booking:
        """
        Create a CONFIRMED booking after maintenance and overlap checks.

        The resource row is locked for the duration of the check and insert,
        and the partial unique index on (resource, start_time) rejects any
        insert that slips past the check.
        """
        # 1. Serialize writers on this resource
        resource = self._lock_resource(resource_id)

        # 2. An out-of-service resource refuses every window
        if not resource.is_operational:
            raise ResourceUnavailableError(str(resource.id), resource.maintenance_reason)

        # 3. Window must be a single grid slot that is still usable
        start_time, end_time = self._normalize(start_time), self._normalize(end_time)
        self._validate_window(start_time, end_time, allow_started)

        # 4. Overlap check
        if Booking.get_conflicts(resource.id, start_time, end_time).exists():
            raise SlotTakenError(details=self._slot_details(resource, start_time, end_time))

        # 5. Insert
        try:
            with transaction.atomic():
                booking = Booking.objects.create(
                    resource=resource,
                    user_id=user_id,
                    start_time=start_time,
                    end_time=end_time,
                    status=Booking.Status.CONFIRMED,
                    origin=origin,
                    created_by=created_by,
                )
        except IntegrityError:
            logger.warning(
                f"Unique slot constraint rejected booking on {resource.id} "
                f"at {start_time.isoformat()}"
            )
            raise SlotTakenError(details=self._slot_details(resource, start_time, end_time))

        logger.info(
            f"Created {origin} booking {booking.id} on {resource.name} "
            f"for {start_time.strftime('%Y-%m-%d %H:%M')}"
        )

        return booking

    def get_booking(self, booking_id: uuid.UUID) -> Booking:
        """Get a booking by ID."""
        try:
            return Booking.objects.select_related('resource').get(id=booking_id)
        except (Booking.DoesNotExist, DjangoValidationError):
            raise NotFoundError('Booking', booking_id)

    def list_user_bookings(
        self,
        user_id: uuid.UUID,
        include_past: bool = False
    ) -> List[Booking]:
        """List bookings of a user; upcoming and current ones unless ``include_past``."""
        if not include_past:
            return list(Booking.get_upcoming_for_user(user_id))

        return list(
            Booking.objects.filter(user_id=user_id)
            .select_related('resource')
            .order_by('-start_time')
        )

    # ==========================================================================
    # Status Transitions
    # ==========================================================================

    def cancel_booking(
        self,
        booking_id: uuid.UUID,
        requesting_user_id: uuid.UUID
    ) -> ReleaseResult:
        """Owner cancels their booking; the freed slot goes to the waitlist."""
        booking = self.get_booking(booking_id)

        if str(booking.user_id) != str(requesting_user_id):
            raise AuthorizationError(
                'cancel_booking',
                user_id=str(requesting_user_id),
                message="Only the owner can cancel this booking."
            )

        return self.release(
            booking,
            cancelled_by=requesting_user_id,
            cancellation_type=Booking.CancellationType.SELF,
        )

    @transaction.atomic
    def release(
        self,
        booking: Booking,
        cancelled_by: uuid.UUID = None,
        cancellation_type: str = Booking.CancellationType.SELF,
        idempotent: bool = False
    ) -> ReleaseResult:
        """
        Cancel a booking and offer its window to the waitlist.

        With ``idempotent`` set, a booking that is already cancelled is
        returned untouched instead of raising.
        """
        self._lock_resource(booking.resource_id)
        booking = Booking.objects.select_for_update().select_related('resource').get(id=booking.id)

        current = booking.effective_status()
        if current == Booking.Status.CANCELLED and idempotent:
            logger.info(f"Booking {booking.id} already released")
            return ReleaseResult(booking=booking, already_released=True)

        if current not in (Booking.Status.CONFIRMED, Booking.Status.ACTIVE):
            raise ConflictError(
                f"Booking is {current.lower()} and can no longer be cancelled.",
                code="BOOKING_NOT_CANCELLABLE",
                details={'booking_id': str(booking.id), 'status': current}
            )

        booking.cancel(cancelled_by, cancellation_type)

        logger.info(
            f"Released booking {booking.id} on {booking.resource.name} "
            f"({cancellation_type})"
        )

        promoted = self.waitlist_service.promote_next(
            booking.resource.resource_type,
            booking.resource_id,
            booking.start_time,
            booking.end_time,
            exclude_user_id=booking.user_id,
        )

        return ReleaseResult(booking=booking, promoted=promoted)

    @transaction.atomic
    def claim_booking(
        self,
        booking_id: uuid.UUID,
        user_id: uuid.UUID
    ) -> Booking:
        """Owner confirms they are using the machine."""
        booking = self.get_booking(booking_id)

        if str(booking.user_id) != str(user_id):
            raise AuthorizationError(
                'claim_booking',
                user_id=str(user_id),
                message="Only the owner can claim this booking."
            )

        current = booking.effective_status()
        if current != Booking.Status.ACTIVE:
            raise ConflictError(
                "A booking can only be claimed while its slot is running.",
                code="BOOKING_NOT_ACTIVE",
                details={'booking_id': str(booking.id), 'status': current}
            )

        if not booking.is_claimed:
            booking.claim()
            logger.info(f"Booking {booking.id} claimed by {user_id}")

        return booking

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _get_resource(self, resource_id: uuid.UUID) -> Resource:
        try:
            return Resource.objects.get(id=resource_id)
        except (Resource.DoesNotExist, DjangoValidationError):
            raise NotFoundError('Resource', resource_id)

    def _lock_resource(self, resource_id: uuid.UUID) -> Resource:
        try:
            return Resource.objects.select_for_update().get(id=resource_id)
        except (Resource.DoesNotExist, DjangoValidationError):
            raise NotFoundError('Resource', resource_id)

    def _normalize(self, value: datetime) -> datetime:
        if timezone.is_naive(value):
            return timezone.make_aware(value, self.grid.tz)
        return value

    def _validate_window(self, start_time: datetime, end_time: datetime, allow_started: bool):
        if end_time <= start_time:
            raise ValidationError("end_time must be after start_time", field='end_time')

        if not self.grid.is_aligned(start_time, end_time):
            raise ValidationError(
                f"Bookings must cover exactly one {self.grid.slot_minutes}-minute slot "
                f"of the daily schedule.",
                field='start_time',
                details={'slot_minutes': self.grid.slot_minutes}
            )

        now = timezone.now()
        if end_time <= now:
            raise ValidationError("This slot has already ended.", field='start_time')

        tolerance = timedelta(minutes=settings.LAUNDRY['PAST_BOOKING_TOLERANCE_MINUTES'])
        if not allow_started and start_time < now - tolerance:
            raise ValidationError("This slot has already started.", field='start_time')

    @staticmethod
    def _slot_details(resource: Resource, start_time: datetime, end_time: datetime) -> dict:
        return {
            'resource_id': str(resource.id),
            'resource_type': resource.resource_type,
            'start_time': start_time.isoformat(),
            'end_time': end_time.isoformat(),
        }
