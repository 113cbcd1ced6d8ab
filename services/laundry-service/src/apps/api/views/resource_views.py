# services/laundry-service/src/apps/api/views/resource_views.py
"""
Resource API Views

Resource listing with live status and slot availability.
"""

import logging

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.core.services import BookingService, ControlService
from apps.api.serializers import (
    ResourceSerializer,
    ResourceListQuerySerializer,
    SlotSerializer,
    SlotQuerySerializer,
)
from .mixins import OrchestratorViewMixin

logger = logging.getLogger(__name__)


class ResourceViewSet(OrchestratorViewMixin, viewsets.ViewSet):
    """
    Read-only resource endpoints.

    list:     resources of a hostel, each with its live status
    retrieve: one resource with its live status
    slots:    free slots of a resource for a date
    """

    permission_classes = [IsAuthenticated]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.booking_service = BookingService()
        self.control_service = ControlService(booking_service=self.booking_service)

    def list(self, request):
        params = self.get_query_params(ResourceListQuerySerializer)
        hostel_id = self.get_hostel_id(params.get('hostel_id'))

        pairs = self.control_service.list_with_status(hostel_id, params.get('resource_type'))
        resources = [resource for resource, _ in pairs]
        serializer = ResourceSerializer(
            resources,
            many=True,
            context={'live_status': {resource.id: status for resource, status in pairs}}
        )
        return Response(serializer.data)

    def retrieve(self, request, pk=None):
        resource, status = self.control_service.get_live_status(pk)
        serializer = ResourceSerializer(resource, context={'live_status': {resource.id: status}})
        return Response(serializer.data)

    @action(detail=True, methods=['get'])
    def slots(self, request, pk=None):
        """Available slots for ``?date=YYYY-MM-DD`` (default today)."""
        params = self.get_query_params(SlotQuerySerializer)

        available = self.booking_service.get_available_slots(pk, params.get('date'))
        slots = available.to_list()

        return Response({
            'resource_id': str(pk),
            'date': available.day.isoformat(),
            'count': len(slots),
            'slots': SlotSerializer(slots, many=True).data,
        })
