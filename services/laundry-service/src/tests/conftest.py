"""
Pytest configuration and fixtures for laundry service tests.
"""

import uuid
from datetime import datetime, timedelta, timezone as dt_timezone
from unittest.mock import patch

import pytest
from rest_framework.test import APIClient


# Monday; with the test TIME_ZONE (UTC) the 45 minute grid runs
# 07:00, 07:45, 08:30, 09:15, 10:00, 10:45, 11:30 ... 22:00
FROZEN_NOW = datetime(2030, 3, 4, 10, 0, tzinfo=dt_timezone.utc)


class FrozenClock:
    """Controls the patched ``django.utils.timezone.now``."""

    def __init__(self, mock):
        self.mock = mock

    @property
    def now(self) -> datetime:
        return self.mock.return_value

    def set(self, moment: datetime):
        self.mock.return_value = moment

    def advance(self, **kwargs):
        self.set(self.now + timedelta(**kwargs))


@pytest.fixture
def frozen_now():
    """Pin the service clock to FROZEN_NOW."""
    with patch('django.utils.timezone.now', return_value=FROZEN_NOW) as mocked:
        yield FrozenClock(mocked)


@pytest.fixture
def slot():
    """Return the (start, end) window of a grid slot on the frozen day."""
    def _slot(hour, minute, day_offset=0, minutes=45):
        start = FROZEN_NOW.replace(hour=hour, minute=minute) + timedelta(days=day_offset)
        return start, start + timedelta(minutes=minutes)
    return _slot


@pytest.fixture
def api_client():
    """Return API client for testing."""
    return APIClient()


@pytest.fixture
def hostel_id():
    """Return a test hostel ID."""
    return uuid.uuid4()


@pytest.fixture
def other_hostel_id():
    return uuid.uuid4()


@pytest.fixture
def user_id():
    """Return a test resident ID."""
    return uuid.uuid4()


@pytest.fixture
def other_user_id():
    return uuid.uuid4()


@pytest.fixture
def admin_id():
    """Return a test admin ID."""
    return uuid.uuid4()


@pytest.fixture
def captured_events():
    """Memory backend contents, emptied before and after the test."""
    from apps.core.events import event_publisher

    event_publisher.clear()
    yield event_publisher.published
    event_publisher.clear()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()


# ==========================================================================
# Model Factories
# ==========================================================================

@pytest.fixture
def create_resource(db, hostel_id):
    """Factory for creating test resources."""
    def _create_resource(**kwargs):
        from apps.core.models import Resource, ResourceType

        defaults = {
            'hostel_id': hostel_id,
            'name': 'Washer 1',
            'resource_type': ResourceType.LAUNDRY,
            'is_operational': True,
        }
        defaults.update(kwargs)
        return Resource.objects.create(**defaults)

    return _create_resource


@pytest.fixture
def create_booking(db, user_id):
    """Factory for creating test bookings."""
    def _create_booking(resource, **kwargs):
        from apps.core.models import Booking

        start_time = kwargs.pop('start_time', FROZEN_NOW + timedelta(minutes=90))
        defaults = {
            'resource': resource,
            'user_id': user_id,
            'start_time': start_time,
            'end_time': start_time + timedelta(minutes=45),
            'status': Booking.Status.CONFIRMED,
            'origin': Booking.Origin.DIRECT,
        }
        defaults.update(kwargs)
        return Booking.objects.create(**defaults)

    return _create_booking


@pytest.fixture
def create_waitlist_entry(db, hostel_id):
    """Factory for creating test waitlist entries."""
    def _create_waitlist_entry(**kwargs):
        from apps.core.models import ResourceType, WaitlistEntry

        defaults = {
            'user_id': uuid.uuid4(),
            'hostel_id': hostel_id,
            'resource_type': ResourceType.LAUNDRY,
            'status': WaitlistEntry.Status.WAITING,
            'joined_at': FROZEN_NOW - timedelta(minutes=30),
        }
        defaults.update(kwargs)
        return WaitlistEntry.objects.create(**defaults)

    return _create_waitlist_entry


# ==========================================================================
# Authenticated Clients
# ==========================================================================

def _token_user(user_id, hostel_id, roles):
    from shared.common.authentication import TokenUser

    return TokenUser({
        'sub': str(user_id),
        'hostel_id': str(hostel_id) if hostel_id else None,
        'roles': roles,
    })


@pytest.fixture
def auth_headers(user_id, hostel_id):
    """Bearer token headers for a resident, signed with the test key."""
    from shared.common.authentication import JWTTokenGenerator

    token = JWTTokenGenerator.generate_access_token(
        user_id=user_id,
        hostel_id=hostel_id,
        roles=['resident'],
    )
    return {'HTTP_AUTHORIZATION': f'Bearer {token}'}


@pytest.fixture
def resident_client(user_id, hostel_id):
    """API client authenticated as a resident of the test hostel."""
    client = APIClient()
    client.force_authenticate(user=_token_user(user_id, hostel_id, ['resident']))
    return client


@pytest.fixture
def other_resident_client(other_user_id, hostel_id):
    client = APIClient()
    client.force_authenticate(user=_token_user(other_user_id, hostel_id, ['resident']))
    return client


@pytest.fixture
def admin_client(admin_id, hostel_id):
    """API client authenticated as the hostel admin."""
    client = APIClient()
    client.force_authenticate(user=_token_user(admin_id, hostel_id, ['admin']))
    return client
