# services/laundry-service/src/apps/core/services/analytics_service.py
"""
Analytics Service

Read-only aggregations over booking and waitlist history of a hostel.
"""

import uuid
import logging
from collections import Counter
from typing import Any, Callable, Dict, List

from django.conf import settings
from django.core.cache import cache
from django.db.models import Count, Q
from django.db.models.functions import ExtractHour, ExtractWeekDay
from django.utils import timezone

from apps.core.models import Booking, WaitlistEntry

logger = logging.getLogger(__name__)

DAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']


class AnalyticsService:
    """
    Hostel usage analytics.

    Results are cached for ``LAUNDRY['ANALYTICS_CACHE_SECONDS']``.
    """

    cache_prefix = 'laundry:analytics'

    def flake_rate(self, hostel_id: uuid.UUID) -> Dict[str, Any]:
        """Share of all-time bookings that ended up cancelled, with a status breakdown."""
        return self._cached('flake_rate', hostel_id, lambda: self._flake_rate(hostel_id))

    def peak_load_heatmap(self, hostel_id: uuid.UUID) -> List[Dict[str, int]]:
        """Booking counts per (day of week, hour), Sunday = 0, in local time."""
        return self._cached('heatmap', hostel_id, lambda: self._heatmap(hostel_id))

    def waitlist_turnaround(self, hostel_id: uuid.UUID) -> Dict[str, Any]:
        """Average minutes from joining the waitlist to being promoted."""
        return self._cached('turnaround', hostel_id, lambda: self._turnaround(hostel_id))

    def summary(self, hostel_id: uuid.UUID) -> Dict[str, Any]:
        """Dashboard numbers: totals, breakdown, queue length, busiest days."""
        flake = self.flake_rate(hostel_id)

        per_day = Counter()
        for cell in self.peak_load_heatmap(hostel_id):
            per_day[cell['day_of_week']] += cell['count']

        peak_days = [
            {'day_of_week': day, 'day_name': DAY_NAMES[day], 'count': count}
            for day, count in sorted(per_day.items(), key=lambda item: (-item[1], item[0]))[:3]
        ]

        waiting = WaitlistEntry.objects.filter(
            hostel_id=hostel_id,
            status=WaitlistEntry.Status.WAITING,
        ).count()

        return {
            'total_bookings': flake['total'],
            'status_breakdown': {
                'confirmed': flake['confirmed'],
                'active': flake['active'],
                'completed': flake['completed'],
                'cancelled': flake['cancelled'],
            },
            'flake_rate': flake['flake_rate'],
            'waitlist_length': waiting,
            'peak_days': peak_days,
        }

    # ==========================================================================
    # Aggregations
    # ==========================================================================

    def _flake_rate(self, hostel_id: uuid.UUID) -> Dict[str, Any]:
        now = timezone.now()
        held = Q(status=Booking.Status.CONFIRMED)

        counts = Booking.objects.filter(resource__hostel_id=hostel_id).aggregate(
            total=Count('id'),
            confirmed=Count('id', filter=held & Q(start_time__gt=now)),
            active=Count('id', filter=held & Q(start_time__lte=now, end_time__gt=now)),
            completed=Count('id', filter=held & Q(end_time__lte=now)),
            cancelled=Count('id', filter=Q(status=Booking.Status.CANCELLED)),
        )

        total = counts['total']
        counts['flake_rate'] = round(counts['cancelled'] / total, 4) if total else 0.0
        return counts

    def _heatmap(self, hostel_id: uuid.UUID) -> List[Dict[str, int]]:
        tz = timezone.get_current_timezone()

        rows = (
            Booking.objects.filter(resource__hostel_id=hostel_id)
            .exclude(status=Booking.Status.CANCELLED)
            .annotate(
                weekday=ExtractWeekDay('start_time', tzinfo=tz),
                hour=ExtractHour('start_time', tzinfo=tz),
            )
            .values('weekday', 'hour')
            .annotate(count=Count('id'))
            .order_by('weekday', 'hour')
        )

        # ExtractWeekDay counts Sunday as 1
        return [
            {'day_of_week': row['weekday'] - 1, 'hour': row['hour'], 'count': row['count']}
            for row in rows
        ]

    def _turnaround(self, hostel_id: uuid.UUID) -> Dict[str, Any]:
        served = WaitlistEntry.objects.filter(
            hostel_id=hostel_id,
            status=WaitlistEntry.Status.FULFILLED,
            fulfilled_at__isnull=False,
        ).values_list('joined_at', 'fulfilled_at')

        waits = [
            (fulfilled_at - joined_at).total_seconds() / 60
            for joined_at, fulfilled_at in served
        ]

        return {
            'total_fulfilled': len(waits),
            'avg_wait_minutes': round(sum(waits) / len(waits), 2) if waits else 0.0,
        }

    def _cached(self, name: str, hostel_id: uuid.UUID, compute: Callable[[], Any]) -> Any:
        timeout = settings.LAUNDRY['ANALYTICS_CACHE_SECONDS']
        if timeout <= 0:
            return compute()

        key = f"{self.cache_prefix}:{name}:{hostel_id}"
        value = cache.get(key)
        if value is None:
            value = compute()
            cache.set(key, value, timeout)
            logger.debug(f"Cached {key} for {timeout}s")
        return value
