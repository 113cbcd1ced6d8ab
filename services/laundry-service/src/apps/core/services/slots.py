# services/laundry-service/src/apps/core/services/slots.py
"""
Slot Grid

The operating day is cut into fixed-length, back-to-back slots starting at
the opening time. A slot never runs past closing time, so the tail of the
day shorter than one slot is not bookable.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, List, Sequence, Tuple

from django.conf import settings
from django.utils import timezone


@dataclass(frozen=True)
class TimeSlot:
    """Half-open window [start, end)."""

    start: datetime
    end: datetime

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return self.start < end and start < self.end

    def to_dict(self) -> dict:
        return {
            'start_time': self.start.isoformat(),
            'end_time': self.end.isoformat(),
        }


class SlotGrid:
    """Daily slot layout in the service time zone."""

    def __init__(
        self,
        slot_minutes: int,
        operating_start: time,
        operating_end: time,
        tz=None
    ):
        if slot_minutes <= 0:
            raise ValueError("slot_minutes must be positive")
        if operating_end <= operating_start:
            raise ValueError("operating window must end after it starts")

        self.slot_minutes = slot_minutes
        self.slot_length = timedelta(minutes=slot_minutes)
        self.operating_start = operating_start
        self.operating_end = operating_end
        self.tz = tz or timezone.get_current_timezone()

    @classmethod
    def from_settings(cls) -> 'SlotGrid':
        config = settings.LAUNDRY
        return cls(
            slot_minutes=config['SLOT_MINUTES'],
            operating_start=_parse_clock(config['OPERATING_START']),
            operating_end=_parse_clock(config['OPERATING_END']),
        )

    def local_date(self, moment: datetime) -> date:
        return timezone.localtime(moment, self.tz).date()

    def today(self) -> date:
        return self.local_date(timezone.now())

    def day_bounds(self, day: date) -> Tuple[datetime, datetime]:
        """Opening and closing instants of ``day``."""
        return (
            timezone.make_aware(datetime.combine(day, self.operating_start), self.tz),
            timezone.make_aware(datetime.combine(day, self.operating_end), self.tz),
        )

    def slots_for(self, day: date) -> Iterator[TimeSlot]:
        opens, closes = self.day_bounds(day)
        cursor = opens
        while cursor + self.slot_length <= closes:
            yield TimeSlot(cursor, cursor + self.slot_length)
            cursor += self.slot_length

    def is_aligned(self, start: datetime, end: datetime) -> bool:
        """True when [start, end) is exactly one slot of its day."""
        if end - start != self.slot_length:
            return False
        candidate = TimeSlot(start, end)
        return candidate in set(self.slots_for(self.local_date(start)))


class AvailableSlots:
    """
    Free slots of one resource on one day, from ``now`` onwards.

    Iterating evaluates lazily and can be repeated; each pass recomputes from
    the same booked intervals and clock reading.
    """

    def __init__(
        self,
        grid: SlotGrid,
        day: date,
        booked: Iterable[Tuple[datetime, datetime]],
        now: datetime,
        closed: bool = False
    ):
        self.grid = grid
        self.day = day
        self.booked: Sequence[Tuple[datetime, datetime]] = tuple(booked)
        self.now = now
        self.closed = closed

    def __iter__(self) -> Iterator[TimeSlot]:
        if self.closed:
            return
        for slot in self.grid.slots_for(self.day):
            if slot.start < self.now:
                continue
            if any(slot.overlaps(start, end) for start, end in self.booked):
                continue
            yield slot

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return next(iter(self), None) is not None

    def to_list(self) -> List[TimeSlot]:
        return list(self)


def _parse_clock(value) -> time:
    if isinstance(value, time):
        return value
    return datetime.strptime(value, '%H:%M').time()
