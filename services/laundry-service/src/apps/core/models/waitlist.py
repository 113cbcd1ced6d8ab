# services/laundry-service/src/apps/core/models/waitlist.py
"""
Waitlist Model

Per-hostel, per-resource-type FIFO queue of residents waiting for a slot.
"""

import uuid

from django.db import models
from django.db.models import Q
from django.utils import timezone

from .resource import ResourceType


class WaitlistEntry(models.Model):
    """
    A resident's standing request for the next free resource of a type.

    Queue order is ``joined_at`` (ties broken by id); the composite index
    below backs the ordered scan done during promotion.
    """

    class Status(models.TextChoices):
        WAITING = 'WAITING', 'Waiting'
        FULFILLED = 'FULFILLED', 'Fulfilled'
        CANCELLED = 'CANCELLED', 'Cancelled'

    # Primary Key
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user_id = models.UUIDField(db_index=True)
    hostel_id = models.UUIDField(db_index=True)
    resource_type = models.CharField(
        max_length=20,
        choices=ResourceType.choices,
        default=ResourceType.LAUNDRY
    )

    # Status
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.WAITING,
        db_index=True
    )

    joined_at = models.DateTimeField(default=timezone.now)

    # Fulfillment
    fulfilled_at = models.DateTimeField(blank=True, null=True)
    fulfilled_booking = models.ForeignKey(
        'laundry_core.Booking',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='waitlist_entries'
    )

    cancelled_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = 'waitlist_entries'
        ordering = ['joined_at', 'id']
        indexes = [
            models.Index(fields=['hostel_id', 'resource_type', 'status', 'joined_at']),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['user_id', 'resource_type'],
                condition=Q(status='WAITING'),
                name='one_waiting_entry_per_type'
            ),
        ]

    def __str__(self):
        return f"Waitlist: {self.user_id} for {self.resource_type} ({self.status})"

    @property
    def is_waiting(self) -> bool:
        return self.status == self.Status.WAITING

    @property
    def wait_minutes(self):
        """Minutes between joining and being served, for fulfilled entries."""
        if not self.fulfilled_at:
            return None
        return (self.fulfilled_at - self.joined_at).total_seconds() / 60

    def fulfill(self, booking):
        """Mark as served by ``booking``."""
        self.status = self.Status.FULFILLED
        self.fulfilled_at = timezone.now()
        self.fulfilled_booking = booking
        self.save(update_fields=['status', 'fulfilled_at', 'fulfilled_booking'])

    def cancel(self):
        """Leave the queue."""
        self.status = self.Status.CANCELLED
        self.cancelled_at = timezone.now()
        self.save(update_fields=['status', 'cancelled_at'])

    # ==========================================================================
    # Query Methods
    # ==========================================================================

    @classmethod
    def get_queue(cls, hostel_id: uuid.UUID, resource_type: str):
        """WAITING entries in promotion order."""
        return cls.objects.filter(
            hostel_id=hostel_id,
            resource_type=resource_type,
            status=cls.Status.WAITING,
        ).order_by('joined_at', 'id')

    @classmethod
    def get_for_user(cls, user_id: uuid.UUID, active_only: bool = True):
        """Waitlist entries of a user."""
        queryset = cls.objects.filter(user_id=user_id)

        if active_only:
            queryset = queryset.filter(status=cls.Status.WAITING)

        return queryset.order_by('-joined_at')
