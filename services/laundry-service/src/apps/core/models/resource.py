# services/laundry-service/src/apps/core/models/resource.py
"""
Resource Model

Bookable machines and courts belonging to a hostel.
"""

import uuid

from django.db import models


class ResourceType(models.TextChoices):
    LAUNDRY = 'LAUNDRY', 'Laundry Machine'
    BADMINTON = 'BADMINTON', 'Badminton Court'


class Resource(models.Model):
    """
    A bookable unit of a hostel.

    Resources are never hard-deleted; taking one out of service only flips
    the operational flag so booking history stays intact.
    """

    # Primary Key
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    hostel_id = models.UUIDField(db_index=True)

    name = models.CharField(max_length=100)
    resource_type = models.CharField(
        max_length=20,
        choices=ResourceType.choices,
        default=ResourceType.LAUNDRY,
        db_index=True
    )

    # Maintenance
    is_operational = models.BooleanField(default=True)
    maintenance_reason = models.CharField(max_length=255, blank=True, null=True)

    # Audit
    created_by = models.UUIDField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'resources'
        ordering = ['name']
        indexes = [
            models.Index(fields=['hostel_id', 'resource_type']),
        ]

    def __str__(self):
        return f"{self.name} ({self.resource_type})"

    @property
    def under_maintenance(self) -> bool:
        return not self.is_operational

    def set_maintenance(self, reason: str = None):
        """Take the resource out of service."""
        self.is_operational = False
        self.maintenance_reason = reason
        self.save(update_fields=['is_operational', 'maintenance_reason', 'updated_at'])

    def clear_maintenance(self):
        """Return the resource to service."""
        self.is_operational = True
        self.maintenance_reason = None
        self.save(update_fields=['is_operational', 'maintenance_reason', 'updated_at'])
