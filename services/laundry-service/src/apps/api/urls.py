# services/laundry-service/src/apps/api/urls.py
"""
Laundry API URL Configuration
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    # Resident
    ResourceViewSet,
    BookingViewSet,
    WaitlistViewSet,
    MyQueueView,
    # Admin
    AdminResourceViewSet,
    AdminBookingViewSet,
    AdminWaitlistView,
    BypassQueueView,
    AnalyticsViewSet,
)

app_name = 'api'

# Create router and register viewsets
router = DefaultRouter()
router.register(r'resources', ResourceViewSet, basename='resource')
router.register(r'bookings', BookingViewSet, basename='booking')
router.register(r'waitlist', WaitlistViewSet, basename='waitlist')
router.register(r'admin/resources', AdminResourceViewSet, basename='admin-resource')
router.register(r'admin/bookings', AdminBookingViewSet, basename='admin-booking')
router.register(r'admin/analytics', AnalyticsViewSet, basename='admin-analytics')

urlpatterns = [
    path('my-queue/', MyQueueView.as_view(), name='my-queue'),
    path('admin/waitlist/', AdminWaitlistView.as_view(), name='admin-waitlist'),
    path('admin/bypass-queue/', BypassQueueView.as_view(), name='admin-bypass-queue'),

    # Router URLs
    path('', include(router.urls)),
]
