# services/laundry-service/src/apps/api/views/waitlist_views.py
"""
Waitlist API Views
"""

import logging

from rest_framework import viewsets, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.services import BookingService, WaitlistService
from apps.api.serializers import (
    BookingSerializer,
    WaitlistEntrySerializer,
    WaitlistJoinSerializer,
)
from .mixins import OrchestratorViewMixin

logger = logging.getLogger(__name__)


class WaitlistViewSet(OrchestratorViewMixin, viewsets.ViewSet):
    """
    Join, inspect and leave the waitlist.
    """

    permission_classes = [IsAuthenticated]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.waitlist_service = WaitlistService()

    def list(self, request):
        """Caller's WAITING entries with their queue positions."""
        entries = self.waitlist_service.list_user_entries(request.user.id)
        return Response(self._serialize(entries))

    def create(self, request):
        """Join the queue for a resource type in the caller's hostel."""
        serializer = WaitlistJoinSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        entry = self.waitlist_service.join(
            request.user.id,
            self.get_hostel_id(),
            serializer.validated_data['resource_type'],
        )

        return Response(self._serialize(entry), status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        """Leave the queue."""
        self.waitlist_service.leave(pk, request.user.id, is_admin=self.is_admin())
        return Response(status=status.HTTP_204_NO_CONTENT)

    def _serialize(self, entries):
        many = isinstance(entries, list)
        positions = {
            entry.id: self.waitlist_service.queue_position(entry)
            for entry in (entries if many else [entries])
        }
        return WaitlistEntrySerializer(entries, many=many, context={'positions': positions}).data


class MyQueueView(OrchestratorViewMixin, APIView):
    """Caller's upcoming bookings and waitlist entries in one response."""

    permission_classes = [IsAuthenticated]

    def get(self, request):
        waitlist_service = WaitlistService()
        booking_service = waitlist_service.booking_service

        bookings = booking_service.list_user_bookings(request.user.id)
        entries = waitlist_service.list_user_entries(request.user.id)
        positions = {entry.id: waitlist_service.queue_position(entry) for entry in entries}

        return Response({
            'bookings': BookingSerializer(bookings, many=True).data,
            'waitlist': WaitlistEntrySerializer(
                entries,
                many=True,
                context={'positions': positions}
            ).data,
        })
