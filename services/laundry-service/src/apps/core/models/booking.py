# services/laundry-service/src/apps/core/models/booking.py
"""
Booking Model

One user's reservation of one resource for one slot.
"""

import uuid
from datetime import datetime

from django.db import models
from django.db.models import Q, F
from django.utils import timezone


class Booking(models.Model):
    """
    Reservation of a resource for a fixed-length slot.

    Only CONFIRMED and CANCELLED are ever stored. ACTIVE and COMPLETED are
    derived from the clock whenever the booking is read.
    """

    class Status(models.TextChoices):
        CONFIRMED = 'CONFIRMED', 'Confirmed'
        ACTIVE = 'ACTIVE', 'Active'
        COMPLETED = 'COMPLETED', 'Completed'
        CANCELLED = 'CANCELLED', 'Cancelled'

    class Origin(models.TextChoices):
        DIRECT = 'DIRECT', 'Booked Directly'
        WAITLIST = 'WAITLIST', 'Promoted From Waitlist'
        BYPASS = 'BYPASS', 'Assigned By Admin'

    class CancellationType(models.TextChoices):
        SELF = 'SELF', 'Cancelled By Owner'
        ADMIN = 'ADMIN', 'Force Released'
        FORFEITED = 'FORFEITED', 'Forfeited (No Show)'

    # Primary Key
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    resource = models.ForeignKey(
        'laundry_core.Resource',
        on_delete=models.PROTECT,
        related_name='bookings'
    )
    user_id = models.UUIDField(db_index=True)

    # Slot
    start_time = models.DateTimeField(db_index=True)
    end_time = models.DateTimeField()

    # Status
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.CONFIRMED,
        db_index=True
    )
    origin = models.CharField(
        max_length=20,
        choices=Origin.choices,
        default=Origin.DIRECT
    )

    # Claim
    claimed_at = models.DateTimeField(blank=True, null=True)

    # Cancellation
    cancelled_at = models.DateTimeField(blank=True, null=True)
    cancelled_by = models.UUIDField(blank=True, null=True)
    cancellation_type = models.CharField(
        max_length=20,
        choices=CancellationType.choices,
        blank=True,
        null=True
    )

    # Audit
    created_at = models.DateTimeField(auto_now_add=True)
    created_by = models.UUIDField(blank=True, null=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bookings'
        ordering = ['start_time']
        indexes = [
            models.Index(fields=['resource', 'start_time', 'end_time']),
            models.Index(fields=['user_id', 'start_time']),
            models.Index(fields=['status', 'start_time']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_time__gt=F('start_time')),
                name='valid_booking_window'
            ),
            models.UniqueConstraint(
                fields=['resource', 'start_time'],
                condition=Q(status='CONFIRMED'),
                name='unique_confirmed_slot_per_resource'
            ),
        ]

    def __str__(self):
        return f"{self.resource_id}: {self.start_time:%Y-%m-%d %H:%M} ({self.status})"

    # ==========================================================================
    # Derived State
    # ==========================================================================

    def effective_status(self, now: datetime = None) -> str:
        """Status as of ``now``; never stale."""
        if self.status == self.Status.CANCELLED:
            return self.Status.CANCELLED

        now = now or timezone.now()
        if now >= self.end_time:
            return self.Status.COMPLETED
        if self.start_time <= now:
            return self.Status.ACTIVE
        return self.Status.CONFIRMED

    def is_live(self, now: datetime = None) -> bool:
        """CONFIRMED or ACTIVE, i.e. still holding its slot."""
        return self.effective_status(now) in (self.Status.CONFIRMED, self.Status.ACTIVE)

    @property
    def is_claimed(self) -> bool:
        return self.claimed_at is not None

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)

    # ==========================================================================
    # Status Transitions
    # ==========================================================================

    def cancel(self, cancelled_by: uuid.UUID, cancellation_type: str):
        """Release the slot."""
        self.status = self.Status.CANCELLED
        self.cancelled_at = timezone.now()
        self.cancelled_by = cancelled_by
        self.cancellation_type = cancellation_type
        self.save(update_fields=[
            'status', 'cancelled_at', 'cancelled_by', 'cancellation_type', 'updated_at'
        ])

    def claim(self):
        """Record that the owner showed up."""
        self.claimed_at = timezone.now()
        self.save(update_fields=['claimed_at', 'updated_at'])

    # ==========================================================================
    # Class Methods
    # ==========================================================================

    @classmethod
    def get_conflicts(
        cls,
        resource_id: uuid.UUID,
        start: datetime,
        end: datetime,
        exclude_booking_id: uuid.UUID = None
    ):
        """Find stored bookings holding any part of [start, end)."""
        queryset = cls.objects.filter(
            resource_id=resource_id,
            status=cls.Status.CONFIRMED,
        ).filter(
            Q(start_time__lt=end) & Q(end_time__gt=start)
        )

        if exclude_booking_id:
            queryset = queryset.exclude(id=exclude_booking_id)

        return queryset

    @classmethod
    def get_for_window(cls, resource_id: uuid.UUID, window_start: datetime, window_end: datetime):
        """Non-cancelled bookings of a resource touching a window, in start order."""
        return cls.objects.filter(
            resource_id=resource_id,
            status=cls.Status.CONFIRMED,
            start_time__lt=window_end,
            end_time__gt=window_start,
        ).order_by('start_time')

    @classmethod
    def get_upcoming_for_user(cls, user_id: uuid.UUID, now: datetime = None):
        """Bookings of a user that have not ended yet."""
        now = now or timezone.now()
        return cls.objects.filter(
            user_id=user_id,
            status=cls.Status.CONFIRMED,
            end_time__gt=now,
        ).select_related('resource').order_by('start_time')
