# services/laundry-service/src/apps/api/views/booking_views.py
"""
Booking API Views

Resident booking endpoints.
"""

import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from shared.common.permissions import IsOwnerOrAdmin
from apps.core.services import BookingService
from apps.api.serializers import (
    BookingSerializer,
    BookingCreateSerializer,
)
from .mixins import OrchestratorViewMixin

logger = logging.getLogger(__name__)


class BookingViewSet(OrchestratorViewMixin, viewsets.GenericViewSet):
    """
    ViewSet for a resident's own bookings.

    Bookings are always made for the caller; cancelling frees the slot and
    hands it to the head of the waitlist.
    """

    serializer_class = BookingSerializer
    permission_classes = [IsAuthenticated]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.booking_service = BookingService()

    def get_permissions(self):
        if self.action == 'retrieve':
            return [IsAuthenticated(), IsOwnerOrAdmin()]
        return super().get_permissions()

    def get_serializer_class(self):
        """Return appropriate serializer based on action."""
        if self.action == 'create':
            return BookingCreateSerializer
        return BookingSerializer

    def list(self, request):
        """Caller's bookings; pass ``?include_past=true`` for history."""
        include_past = request.query_params.get('include_past', '').lower() == 'true'
        bookings = self.booking_service.list_user_bookings(request.user.id, include_past)

        page = self.paginate_queryset(bookings)
        if page is not None:
            return self.get_paginated_response(BookingSerializer(page, many=True).data)
        return Response(BookingSerializer(bookings, many=True).data)

    def create(self, request):
        """Book a slot."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        booking = self.booking_service.book_slot(
            data['resource_id'],
            request.user.id,
            data['start_time'],
            data['end_time'],
        )

        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        booking = self.booking_service.get_booking(pk)
        self.check_object_permissions(request, booking)
        return Response(BookingSerializer(booking).data)

    def destroy(self, request, pk=None):
        """Cancel the caller's booking."""
        self.booking_service.cancel_booking(pk, request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def claim(self, request, pk=None):
        """Confirm the caller is using the machine."""
        booking = self.booking_service.claim_booking(pk, request.user.id)
        return Response(BookingSerializer(booking).data)
