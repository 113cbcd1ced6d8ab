"""
Laundry API Views
"""

from .resource_views import ResourceViewSet
from .booking_views import BookingViewSet
from .waitlist_views import WaitlistViewSet, MyQueueView
from .admin_views import (
    AdminResourceViewSet,
    AdminBookingViewSet,
    AdminWaitlistView,
    BypassQueueView,
    AnalyticsViewSet,
)


__all__ = [
    'ResourceViewSet',
    'BookingViewSet',
    'WaitlistViewSet',
    'MyQueueView',
    'AdminResourceViewSet',
    'AdminBookingViewSet',
    'AdminWaitlistView',
    'BypassQueueView',
    'AnalyticsViewSet',
]
