# services/laundry-service/src/apps/core/services/resource_service.py
"""
Resource Service

Registry of hostel machines and their maintenance state.
"""

import uuid
import logging
from typing import List

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from apps.core.models import Resource, ResourceType
from .exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class ResourceService:
    """Create, look up and toggle maintenance on resources."""

    @transaction.atomic
    def create_resource(
        self,
        hostel_id: uuid.UUID,
        name: str,
        resource_type: str = ResourceType.LAUNDRY,
        created_by: uuid.UUID = None
    ) -> Resource:
        """Register a new resource for a hostel."""
        name = (name or '').strip()
        if not name:
            raise ValidationError("Resource name must not be empty", field='name')

        if resource_type not in ResourceType.values:
            raise ValidationError(
                f"Unknown resource type: {resource_type}",
                field='resource_type'
            )

        resource = Resource.objects.create(
            hostel_id=hostel_id,
            name=name,
            resource_type=resource_type,
            created_by=created_by,
        )

        logger.info(f"Created {resource_type} resource {resource.id} ({name}) in hostel {hostel_id}")
        return resource

    def get_resource(self, resource_id: uuid.UUID) -> Resource:
        """Get a resource by ID."""
        try:
            return Resource.objects.get(id=resource_id)
        except (Resource.DoesNotExist, DjangoValidationError):
            raise NotFoundError('Resource', resource_id)

    def list_by_hostel(
        self,
        hostel_id: uuid.UUID,
        resource_type: str = None
    ) -> List[Resource]:
        queryset = Resource.objects.filter(hostel_id=hostel_id)

        if resource_type:
            queryset = queryset.filter(resource_type=resource_type)

        return list(queryset.order_by('resource_type', 'name'))

    # ==========================================================================
    # Maintenance
    # ==========================================================================

    @transaction.atomic
    def set_maintenance(self, resource_id: uuid.UUID, reason: str = None) -> Resource:
        """
        Take a resource out of service.

        Existing bookings are left in place so current users can finish;
        only new bookings are refused.
        """
        resource = self._lock(resource_id)
        resource.set_maintenance(reason)

        logger.info(f"Resource {resource.id} under maintenance: {reason}")
        return resource

    @transaction.atomic
    def clear_maintenance(self, resource_id: uuid.UUID) -> Resource:
        """Return a resource to service."""
        resource = self._lock(resource_id)
        resource.clear_maintenance()

        logger.info(f"Resource {resource.id} back in service")
        return resource

    def _lock(self, resource_id: uuid.UUID) -> Resource:
        try:
            return Resource.objects.select_for_update().get(id=resource_id)
        except (Resource.DoesNotExist, DjangoValidationError):
            raise NotFoundError('Resource', resource_id)
