"""
Laundry Service Business Logic
"""

from .exceptions import (
    OrchestratorError,
    ValidationError,
    ConflictError,
    SlotTakenError,
    ResourceUnavailableError,
    AuthorizationError,
    NotFoundError,
)
from .slots import TimeSlot, SlotGrid, AvailableSlots
from .live_status import LiveStatus, ResourceStatus, derive_live_status
from .resource_service import ResourceService
from .booking_service import BookingService, ReleaseResult
from .waitlist_service import WaitlistService
from .control_service import ControlService
from .analytics_service import AnalyticsService


__all__ = [
    # Services
    'ResourceService',
    'BookingService',
    'WaitlistService',
    'ControlService',
    'AnalyticsService',

    # Value types
    'TimeSlot',
    'SlotGrid',
    'AvailableSlots',
    'LiveStatus',
    'ResourceStatus',
    'ReleaseResult',
    'derive_live_status',

    # Exceptions
    'OrchestratorError',
    'ValidationError',
    'ConflictError',
    'SlotTakenError',
    'ResourceUnavailableError',
    'AuthorizationError',
    'NotFoundError',
]
