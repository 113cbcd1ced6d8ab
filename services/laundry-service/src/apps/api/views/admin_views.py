# services/laundry-service/src/apps/api/views/admin_views.py
"""
Admin API Views

Privileged control-plane endpoints for hostel administrators.
"""

import logging
from collections import defaultdict

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from shared.common.permissions import IsAdmin
from apps.core.services import (
    AnalyticsService,
    BookingService,
    ControlService,
    ResourceService,
    WaitlistService,
)
from apps.api.serializers import (
    BookingSerializer,
    BypassQueueSerializer,
    FlakeRateSerializer,
    HeatmapCellSerializer,
    HostelQuerySerializer,
    MaintenanceUpdateSerializer,
    ReleaseResultSerializer,
    ResourceCreateSerializer,
    ResourceSerializer,
    TurnaroundSerializer,
    WaitlistEntrySerializer,
    WaitlistQuerySerializer,
)
from .mixins import OrchestratorViewMixin

logger = logging.getLogger(__name__)


class AdminResourceViewSet(OrchestratorViewMixin, viewsets.ViewSet):
    """
    create:         register a resource
    partial_update: set or clear maintenance
    """

    permission_classes = [IsAdmin]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.resource_service = ResourceService()
        self.control_service = ControlService(resource_service=self.resource_service)

    def create(self, request):
        serializer = ResourceCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        resource = self.resource_service.create_resource(
            hostel_id=self.get_hostel_id(data.get('hostel_id')),
            name=data['name'],
            resource_type=data['resource_type'],
            created_by=request.user.id,
        )

        return Response(self._with_status(resource.id), status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        serializer = MaintenanceUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        self.check_hostel_access(self.resource_service.get_resource(pk).hostel_id)

        if data['is_operational']:
            self.resource_service.clear_maintenance(pk)
        else:
            self.resource_service.set_maintenance(pk, data.get('maintenance_reason'))

        return Response(self._with_status(pk))

    def _with_status(self, resource_id):
        resource, live = self.control_service.get_live_status(resource_id)
        return ResourceSerializer(resource, context={'live_status': {resource.id: live}}).data


class AdminBookingViewSet(OrchestratorViewMixin, viewsets.GenericViewSet):
    """
    force_cancel: release any booking and promote the waitlist
    active:       bookings of the hostel that have not ended
    """

    serializer_class = BookingSerializer
    permission_classes = [IsAdmin]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.control_service = ControlService()

    @action(detail=True, methods=['post'], url_path='force-cancel')
    def force_cancel(self, request, pk=None):
        booking = self.control_service.booking_service.get_booking(pk)
        self.check_hostel_access(booking.resource.hostel_id)

        result = self.control_service.force_release(pk, request.user.id)
        return Response(ReleaseResultSerializer(result).data)

    @action(detail=False, methods=['get'])
    def active(self, request):
        params = self.get_query_params(HostelQuerySerializer)
        bookings = self.control_service.active_bookings(self.get_hostel_id(params.get('hostel_id')))

        page = self.paginate_queryset(bookings)
        if page is not None:
            return self.get_paginated_response(BookingSerializer(page, many=True).data)
        return Response(BookingSerializer(bookings, many=True).data)


class AdminWaitlistView(OrchestratorViewMixin, APIView):
    """WAITING entries of the hostel in promotion order."""

    permission_classes = [IsAdmin]

    def get(self, request):
        params = self.get_query_params(WaitlistQuerySerializer)
        hostel_id = self.get_hostel_id(params.get('hostel_id'))

        entries = WaitlistService().list_waiting(hostel_id, params.get('resource_type'))

        # Entries arrive grouped by type, oldest first
        positions = {}
        counters = defaultdict(int)
        for entry in entries:
            counters[entry.resource_type] += 1
            positions[entry.id] = counters[entry.resource_type]

        return Response(WaitlistEntrySerializer(
            entries,
            many=True,
            context={'positions': positions}
        ).data)


class BypassQueueView(OrchestratorViewMixin, APIView):
    """Assign a slot to a user regardless of the waitlist."""

    permission_classes = [IsAdmin]

    def post(self, request):
        serializer = BypassQueueSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        self.check_hostel_access(ResourceService().get_resource(data['resource_id']).hostel_id)

        booking = ControlService().bypass_queue(
            data['user_id'],
            data['resource_id'],
            data['start_time'],
            data['end_time'],
            admin_id=request.user.id,
        )

        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)


class AnalyticsViewSet(OrchestratorViewMixin, viewsets.ViewSet):
    """Hostel usage analytics."""

    permission_classes = [IsAdmin]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.analytics_service = AnalyticsService()

    def _hostel_id(self):
        return self.get_hostel_id(self.get_query_params(HostelQuerySerializer).get('hostel_id'))

    @action(detail=False, methods=['get'], url_path='flake-rate')
    def flake_rate(self, request):
        data = self.analytics_service.flake_rate(self._hostel_id())
        return Response(FlakeRateSerializer(data).data)

    @action(detail=False, methods=['get'])
    def heatmap(self, request):
        cells = self.analytics_service.peak_load_heatmap(self._hostel_id())
        return Response(HeatmapCellSerializer(cells, many=True).data)

    @action(detail=False, methods=['get'], url_path='waitlist-turnaround')
    def waitlist_turnaround(self, request):
        data = self.analytics_service.waitlist_turnaround(self._hostel_id())
        return Response(TurnaroundSerializer(data).data)

    @action(detail=False, methods=['get'])
    def summary(self, request):
        return Response(self.analytics_service.summary(self._hostel_id()))
