"""
Laundry API Serializers
"""

from .resource_serializers import (
    ResourceSerializer,
    ResourceCreateSerializer,
    MaintenanceUpdateSerializer,
)

from .booking_serializers import (
    BookingSerializer,
    BookingCreateSerializer,
    BypassQueueSerializer,
    ReleaseResultSerializer,
    SlotSerializer,
    SlotQuerySerializer,
)

from .waitlist_serializers import (
    WaitlistEntrySerializer,
    WaitlistJoinSerializer,
    WaitlistQuerySerializer,
)

from .analytics_serializers import (
    HostelQuerySerializer,
    ResourceListQuerySerializer,
    FlakeRateSerializer,
    HeatmapCellSerializer,
    TurnaroundSerializer,
)


__all__ = [
    # Resource
    'ResourceSerializer',
    'ResourceCreateSerializer',
    'MaintenanceUpdateSerializer',

    # Booking
    'BookingSerializer',
    'BookingCreateSerializer',
    'BypassQueueSerializer',
    'ReleaseResultSerializer',
    'SlotSerializer',
    'SlotQuerySerializer',

    # Waitlist
    'WaitlistEntrySerializer',
    'WaitlistJoinSerializer',
    'WaitlistQuerySerializer',

    # Analytics
    'HostelQuerySerializer',
    'ResourceListQuerySerializer',
    'FlakeRateSerializer',
    'HeatmapCellSerializer',
    'TurnaroundSerializer',
]
