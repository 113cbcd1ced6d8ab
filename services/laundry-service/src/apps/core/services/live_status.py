# services/laundry-service/src/apps/core/services/live_status.py
"""
Live Status

Display status of a resource, derived on read from the resource, its
bookings for the day and the clock. Nothing here touches the database.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from apps.core.models import Booking, Resource
from .slots import AvailableSlots, SlotGrid


class LiveStatus:
    AVAILABLE = 'AVAILABLE'
    IN_USE = 'IN_USE'
    FULLY_BOOKED = 'FULLY_BOOKED'
    MAINTENANCE = 'MAINTENANCE'


@dataclass(frozen=True)
class ResourceStatus:
    status: str
    slots_left: int = 0
    current_user_id: Optional[uuid.UUID] = None
    available_at: Optional[datetime] = None
    maintenance_reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'status': self.status,
            'slots_left': self.slots_left,
            'current_user_id': str(self.current_user_id) if self.current_user_id else None,
            'available_at': self.available_at.isoformat() if self.available_at else None,
            'maintenance_reason': self.maintenance_reason,
        }


def derive_live_status(
    resource: Resource,
    bookings: Iterable[Booking],
    now: datetime,
    grid: SlotGrid
) -> ResourceStatus:
    """
    MAINTENANCE when out of service, else IN_USE while a booking is running,
    else FULLY_BOOKED when no slot is left today, else AVAILABLE.
    """
    if not resource.is_operational:
        return ResourceStatus(
            LiveStatus.MAINTENANCE,
            maintenance_reason=resource.maintenance_reason,
        )

    holding = [
        b for b in bookings
        if b.resource_id == resource.id and b.is_live(now)
    ]

    slots_left = len(AvailableSlots(
        grid,
        grid.local_date(now),
        booked=[(b.start_time, b.end_time) for b in holding],
        now=now,
    ))

    running = next(
        (b for b in holding if b.effective_status(now) == Booking.Status.ACTIVE),
        None
    )
    if running:
        return ResourceStatus(
            LiveStatus.IN_USE,
            slots_left=slots_left,
            current_user_id=running.user_id,
            available_at=running.end_time,
        )

    if slots_left == 0:
        return ResourceStatus(LiveStatus.FULLY_BOOKED)

    return ResourceStatus(LiveStatus.AVAILABLE, slots_left=slots_left)
