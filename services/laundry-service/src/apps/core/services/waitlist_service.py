# services/laundry-service/src/apps/core/services/waitlist_service.py
"""
Waitlist Service

FIFO queue per hostel and resource type, with automatic promotion into
freed slots.
"""

import uuid
import logging
from datetime import datetime, timedelta
from typing import Optional, List

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from apps.core.models import Booking, Resource, ResourceType, WaitlistEntry
from .booking_service import BookingService
from .exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class WaitlistService:
    """
    Service for managing the waitlist.

    Handles:
    - Joining and leaving the queue
    - Queue inspection and positions
    - Promotion of the queue head into a freed slot
    """

    def __init__(self, booking_service: BookingService = None):
        self.booking_service = booking_service or BookingService()

    # ==========================================================================
    # Waitlist CRUD
    # ==========================================================================

    @transaction.atomic
    def join(
        self,
        user_id: uuid.UUID,
        hostel_id: uuid.UUID,
        resource_type: str
    ) -> WaitlistEntry:
        """Add a user to the queue for a resource type."""
        if resource_type not in ResourceType.values:
            raise ValidationError(
                f"Unknown resource type: {resource_type}",
                field='resource_type'
            )

        already_waiting = WaitlistEntry.objects.filter(
            user_id=user_id,
            resource_type=resource_type,
            status=WaitlistEntry.Status.WAITING,
        ).exists()
        if already_waiting:
            raise self._already_waiting(resource_type)

        try:
            with transaction.atomic():
                entry = WaitlistEntry.objects.create(
                    user_id=user_id,
                    hostel_id=hostel_id,
                    resource_type=resource_type,
                    joined_at=timezone.now(),
                )
        except IntegrityError:
            raise self._already_waiting(resource_type)

        logger.info(f"User {user_id} joined {resource_type} waitlist of hostel {hostel_id}")
        return entry

    @transaction.atomic
    def leave(
        self,
        entry_id: uuid.UUID,
        requesting_user_id: uuid.UUID,
        is_admin: bool = False
    ) -> WaitlistEntry:
        """Withdraw a WAITING entry. Owners and admins only."""
        try:
            entry = WaitlistEntry.objects.select_for_update().get(id=entry_id)
        except (WaitlistEntry.DoesNotExist, DjangoValidationError):
            raise NotFoundError('Waitlist entry', entry_id)

        if not is_admin and str(entry.user_id) != str(requesting_user_id):
            raise AuthorizationError(
                'leave_waitlist',
                user_id=str(requesting_user_id),
                message="Only the owner can leave this waitlist entry."
            )

        if entry.status != WaitlistEntry.Status.WAITING:
            raise ConflictError(
                f"Waitlist entry is already {entry.status.lower()}.",
                code="WAITLIST_ENTRY_CLOSED",
                details={'entry_id': str(entry.id), 'status': entry.status}
            )

        entry.cancel()

        logger.info(f"Waitlist entry {entry.id} left by {requesting_user_id}")
        return entry

    def get_entry(self, entry_id: uuid.UUID) -> WaitlistEntry:
        """Get a waitlist entry by ID."""
        try:
            return WaitlistEntry.objects.get(id=entry_id)
        except (WaitlistEntry.DoesNotExist, DjangoValidationError):
            raise NotFoundError('Waitlist entry', entry_id)

    def list_user_entries(
        self,
        user_id: uuid.UUID,
        active_only: bool = True
    ) -> List[WaitlistEntry]:
        return list(WaitlistEntry.get_for_user(user_id, active_only=active_only))

    def list_waiting(
        self,
        hostel_id: uuid.UUID,
        resource_type: str = None
    ) -> List[WaitlistEntry]:
        """WAITING entries of a hostel in promotion order."""
        queryset = WaitlistEntry.objects.filter(
            hostel_id=hostel_id,
            status=WaitlistEntry.Status.WAITING,
        )

        if resource_type:
            queryset = queryset.filter(resource_type=resource_type)

        return list(queryset.order_by('resource_type', 'joined_at', 'id'))

    def queue_position(self, entry: WaitlistEntry) -> Optional[int]:
        """1-based position of a WAITING entry in its queue."""
        if entry.status != WaitlistEntry.Status.WAITING:
            return None

        ahead = WaitlistEntry.get_queue(entry.hostel_id, entry.resource_type).filter(
            Q(joined_at__lt=entry.joined_at) |
            Q(joined_at=entry.joined_at, id__lt=entry.id)
        ).count()
        return ahead + 1

    # ==========================================================================
    # Promotion
    # ==========================================================================

    @transaction.atomic
    def promote_next(
        self,
        resource_type: str,
        resource_id: uuid.UUID,
        freed_start: datetime,
        freed_end: datetime,
        exclude_user_id: uuid.UUID = None
    ) -> Optional[Booking]:
        """
        Book the freed window for the earliest waiting user.

        Candidates are tried in FIFO order; a candidate whose booking is
        rejected is skipped and stays WAITING. Returns None when the queue
        is empty, every attempt failed, or too little of the window is left.
        """
        now = timezone.now()
        usable = freed_end - max(now, freed_start)
        minimum = timedelta(minutes=settings.LAUNDRY['MINIMUM_USABLE_MINUTES'])
        if usable < minimum:
            logger.info(
                f"Skipping promotion for {resource_id}: only "
                f"{int(usable.total_seconds() // 60)} minutes left"
            )
            return None

        try:
            resource = Resource.objects.get(id=resource_id)
        except Resource.DoesNotExist:
            raise NotFoundError('Resource', resource_id)

        # Queue is read and locked in the same transaction as the promotion write
        candidates = WaitlistEntry.get_queue(resource.hostel_id, resource_type).select_for_update()
        if exclude_user_id:
            candidates = candidates.exclude(user_id=exclude_user_id)

        for entry in list(candidates):
            try:
                with transaction.atomic():
                    booking = self.booking_service.create_booking(
                        resource.id,
                        entry.user_id,
                        freed_start,
                        freed_end,
                        origin=Booking.Origin.WAITLIST,
                        allow_started=True,
                    )
                    entry.fulfill(booking)
            except ConflictError as e:
                logger.warning(
                    f"Promotion of waitlist entry {entry.id} failed, trying next: {e.message}"
                )
                continue

            logger.info(
                f"Promoted waitlist entry {entry.id} into booking {booking.id} "
                f"on {resource.name}"
            )
            return booking

        return None

    @staticmethod
    def _already_waiting(resource_type: str) -> ConflictError:
        return ConflictError(
            f"You are already on the {resource_type.lower()} waitlist.",
            code="ALREADY_WAITING",
            details={'resource_type': resource_type}
        )
