"""
Unit tests for laundry service business logic.
"""

import uuid
import pytest
from datetime import date, timedelta
from unittest.mock import MagicMock, patch

from apps.core.models import Booking, Resource, ResourceType, WaitlistEntry
from apps.core.services import (
    AuthorizationError,
    BookingService,
    ConflictError,
    ControlService,
    LiveStatus,
    NotFoundError,
    ResourceService,
    ResourceUnavailableError,
    SlotTakenError,
    ValidationError,
    WaitlistService,
)
from tests.conftest import FROZEN_NOW


@pytest.mark.django_db
class TestResourceService:
    """Tests for ResourceService."""

    def setup_method(self):
        self.service = ResourceService()

    def test_create_resource(self, hostel_id, admin_id):
        resource = self.service.create_resource(
            hostel_id, '  Dryer 1 ', ResourceType.LAUNDRY, created_by=admin_id
        )

        assert resource.name == 'Dryer 1'
        assert resource.is_operational is True
        assert resource.created_by == admin_id

    def test_create_resource_rejects_blank_name(self, hostel_id):
        with pytest.raises(ValidationError) as exc_info:
            self.service.create_resource(hostel_id, '   ')

        assert exc_info.value.details['field'] == 'name'

    def test_create_resource_rejects_unknown_type(self, hostel_id):
        with pytest.raises(ValidationError):
            self.service.create_resource(hostel_id, 'Pool table', 'BILLIARDS')

    def test_get_resource_not_found(self):
        with pytest.raises(NotFoundError):
            self.service.get_resource(uuid.uuid4())

    def test_list_by_hostel(self, create_resource, hostel_id, other_hostel_id):
        """Test listing is scoped to the hostel and optionally the type."""
        washer = create_resource(name='Washer 1')
        court = create_resource(name='Court A', resource_type=ResourceType.BADMINTON)
        create_resource(name='Elsewhere', hostel_id=other_hostel_id)

        assert self.service.list_by_hostel(hostel_id) == [court, washer]
        assert self.service.list_by_hostel(hostel_id, ResourceType.LAUNDRY) == [washer]

    def test_maintenance_keeps_existing_bookings(self, frozen_now, create_resource, create_booking):
        """Test taking a machine out of service leaves its bookings alone."""
        resource = create_resource()
        booking = create_booking(resource)

        self.service.set_maintenance(resource.id, 'Door jammed')
        booking.refresh_from_db()

        assert Resource.objects.get(id=resource.id).under_maintenance
        assert booking.status == Booking.Status.CONFIRMED

        resource = self.service.clear_maintenance(resource.id)
        assert resource.is_operational is True
        assert resource.maintenance_reason is None


@pytest.mark.django_db
class TestBookingService:
    """Tests for BookingService."""

    def setup_method(self):
        self.service = BookingService()

    def test_available_slots(self, frozen_now, create_resource, create_booking, slot):
        """Test booked and started slots are not offered."""
        resource = create_resource()
        start, end = slot(11, 30)
        create_booking(resource, start_time=start, end_time=end)

        available = self.service.get_available_slots(resource.id)
        starts = [s.start for s in available]

        assert available.day == date(2030, 3, 4)
        assert len(starts) == 16
        assert starts[0] == FROZEN_NOW
        assert start not in starts

    def test_available_slots_for_other_day(self, frozen_now, create_resource):
        available = self.service.get_available_slots(create_resource().id, date(2030, 3, 5))
        assert len(available) == 21

    def test_available_slots_under_maintenance(self, frozen_now, create_resource):
        resource = create_resource(is_operational=False)
        assert self.service.get_available_slots(resource.id).to_list() == []

    def test_book_slot(self, frozen_now, create_resource, user_id, slot):
        """Test a resident books a free slot."""
        resource = create_resource()
        start, end = slot(11, 30)

        booking = self.service.book_slot(resource.id, user_id, start, end)

        assert booking.status == Booking.Status.CONFIRMED
        assert booking.origin == Booking.Origin.DIRECT
        assert booking.user_id == user_id
        assert booking.created_by == user_id
        assert booking.created_at == FROZEN_NOW

    def test_book_taken_slot(self, frozen_now, create_resource, create_booking, other_user_id, slot):
        """Test the second booker is told to join the waitlist."""
        resource = create_resource()
        start, end = slot(11, 30)
        create_booking(resource, start_time=start, end_time=end)

        with pytest.raises(SlotTakenError) as exc_info:
            self.service.book_slot(resource.id, other_user_id, start, end)

        error = exc_info.value
        assert error.code == 'SLOT_TAKEN'
        assert error.details['action_required'] == 'JOIN_WAITLIST'
        assert error.details['resource_id'] == str(resource.id)
        assert Booking.objects.filter(resource=resource).count() == 1

    def test_rebook_cancelled_slot(self, frozen_now, create_resource, create_booking, other_user_id, slot):
        resource = create_resource()
        start, end = slot(11, 30)
        create_booking(resource, start_time=start, end_time=end, status=Booking.Status.CANCELLED)

        booking = self.service.book_slot(resource.id, other_user_id, start, end)
        assert booking.user_id == other_user_id

    def test_book_under_maintenance(self, frozen_now, create_resource, user_id, slot):
        resource = create_resource(is_operational=False, maintenance_reason='Leaking')

        with pytest.raises(ResourceUnavailableError) as exc_info:
            self.service.book_slot(resource.id, user_id, *slot(11, 30))

        assert exc_info.value.details['maintenance_reason'] == 'Leaking'

    def test_book_under_maintenance_rejects_any_window(self, frozen_now, create_resource, user_id, slot):
        """Test maintenance is reported whatever window is asked for."""
        resource = create_resource(is_operational=False, maintenance_reason='motor repair')

        for window in (slot(11, 0), slot(8, 30), slot(10, 45, minutes=90)):
            with pytest.raises(ConflictError) as exc_info:
                self.service.book_slot(resource.id, user_id, *window)

            assert exc_info.value.code == 'RESOURCE_UNDER_MAINTENANCE'
            assert exc_info.value.details['maintenance_reason'] == 'motor repair'

    def test_held_slot_is_hidden_refused_and_passed_to_queue(
        self, frozen_now, create_resource, user_id, other_user_id, hostel_id, slot
    ):
        """Test a held 10:00 slot is refused to others and handed to the queue once freed."""
        frozen_now.set(FROZEN_NOW - timedelta(hours=1))
        resource = create_resource()
        start, end = slot(10, 0)
        held = self.service.book_slot(resource.id, user_id, start, end)

        starts = [s.start for s in self.service.get_available_slots(resource.id)]
        assert start not in starts
        assert end in starts

        with pytest.raises(SlotTakenError):
            self.service.book_slot(resource.id, other_user_id, start, end)

        waiting = WaitlistService().join(uuid.uuid4(), hostel_id, ResourceType.LAUNDRY)
        frozen_now.advance(minutes=5)

        result = self.service.cancel_booking(held.id, user_id)

        assert result.promoted.user_id == waiting.user_id
        assert (result.promoted.start_time, result.promoted.end_time) == (start, end)
        waiting.refresh_from_db()
        assert waiting.status == WaitlistEntry.Status.FULFILLED

    def test_unique_index_catches_missed_overlap(
        self, frozen_now, create_resource, create_booking, other_user_id, slot
    ):
        """Test a concurrent insert that slips past the overlap query still ends as SLOT_TAKEN."""
        resource = create_resource()
        start, end = slot(11, 30)
        create_booking(resource, start_time=start, end_time=end)

        with patch.object(Booking, 'get_conflicts', return_value=Booking.objects.none()):
            with pytest.raises(SlotTakenError) as exc_info:
                self.service.book_slot(resource.id, other_user_id, start, end)

        assert exc_info.value.details['action_required'] == 'JOIN_WAITLIST'
        assert Booking.objects.filter(resource=resource).count() == 1

        later = self.service.book_slot(resource.id, other_user_id, *slot(12, 15))
        assert later.status == Booking.Status.CONFIRMED

    def test_book_misaligned_window(self, frozen_now, create_resource, user_id, slot):
        with pytest.raises(ValidationError):
            self.service.book_slot(create_resource().id, user_id, *slot(11, 0))

    def test_book_window_longer_than_one_slot(self, frozen_now, create_resource, user_id, slot):
        with pytest.raises(ValidationError):
            self.service.book_slot(create_resource().id, user_id, *slot(11, 30, minutes=90))

    def test_book_ended_slot(self, frozen_now, create_resource, user_id, slot):
        with pytest.raises(ValidationError):
            self.service.book_slot(create_resource().id, user_id, *slot(8, 30))

    def test_book_started_slot_within_tolerance(self, frozen_now, create_resource, user_id, slot):
        """Test a slot that started moments ago can still be booked."""
        frozen_now.set(FROZEN_NOW + timedelta(minutes=3))

        booking = self.service.book_slot(create_resource().id, user_id, *slot(10, 0))
        assert booking.status == Booking.Status.CONFIRMED

    def test_book_started_slot_past_tolerance(self, frozen_now, create_resource, user_id, slot):
        frozen_now.set(FROZEN_NOW + timedelta(minutes=10))

        with pytest.raises(ValidationError):
            self.service.book_slot(create_resource().id, user_id, *slot(10, 0))

    def test_book_unknown_resource(self, frozen_now, user_id, slot):
        with pytest.raises(NotFoundError):
            self.service.book_slot(uuid.uuid4(), user_id, *slot(11, 30))

    def test_book_naive_times_use_local_zone(self, frozen_now, create_resource, user_id, slot):
        start, end = slot(11, 30)

        booking = self.service.book_slot(
            create_resource().id, user_id, start.replace(tzinfo=None), end.replace(tzinfo=None)
        )
        assert booking.start_time == start

    def test_list_user_bookings(self, frozen_now, create_resource, create_booking, user_id, slot):
        """Test default listing hides ended and cancelled bookings."""
        resource = create_resource()
        past = create_booking(resource, start_time=slot(8, 30)[0])
        upcoming = create_booking(resource, start_time=slot(11, 30)[0])
        cancelled = create_booking(
            resource, start_time=slot(12, 15)[0], status=Booking.Status.CANCELLED
        )

        assert self.service.list_user_bookings(user_id) == [upcoming]
        assert self.service.list_user_bookings(user_id, include_past=True) == [
            cancelled, upcoming, past
        ]

    def test_get_booking_not_found(self):
        with pytest.raises(NotFoundError):
            self.service.get_booking(uuid.uuid4())

    def test_get_booking_malformed_id(self):
        with pytest.raises(NotFoundError):
            self.service.get_booking('not-a-uuid')

    def test_cancel_booking(self, frozen_now, create_resource, create_booking, user_id):
        booking = create_booking(create_resource())

        result = self.service.cancel_booking(booking.id, user_id)

        assert result.booking.status == Booking.Status.CANCELLED
        assert result.booking.cancellation_type == Booking.CancellationType.SELF
        assert result.booking.cancelled_by == user_id
        assert result.promoted is None

    def test_cancel_booking_not_owner(self, frozen_now, create_resource, create_booking, other_user_id):
        booking = create_booking(create_resource())

        with pytest.raises(AuthorizationError):
            self.service.cancel_booking(booking.id, other_user_id)

        booking.refresh_from_db()
        assert booking.status == Booking.Status.CONFIRMED

    def test_cancel_twice(self, frozen_now, create_resource, create_booking, user_id):
        booking = create_booking(create_resource())
        self.service.cancel_booking(booking.id, user_id)

        with pytest.raises(ConflictError) as exc_info:
            self.service.cancel_booking(booking.id, user_id)

        assert exc_info.value.code == 'BOOKING_NOT_CANCELLABLE'

    def test_cancel_completed_booking(self, frozen_now, create_resource, create_booking, user_id, slot):
        booking = create_booking(create_resource(), start_time=slot(8, 30)[0])

        with pytest.raises(ConflictError):
            self.service.cancel_booking(booking.id, user_id)

    def test_cancel_promotes_first_in_queue(
        self, frozen_now, create_resource, create_booking, create_waitlist_entry, user_id, slot
    ):
        """Test the oldest waiting user gets the freed slot."""
        resource = create_resource()
        start, end = slot(11, 30)
        booking = create_booking(resource, start_time=start, end_time=end)
        first = create_waitlist_entry(joined_at=FROZEN_NOW - timedelta(minutes=60))
        second = create_waitlist_entry(joined_at=FROZEN_NOW - timedelta(minutes=30))

        result = self.service.cancel_booking(booking.id, user_id)

        promoted = result.promoted
        assert promoted is not None
        assert promoted.user_id == first.user_id
        assert promoted.origin == Booking.Origin.WAITLIST
        assert (promoted.start_time, promoted.end_time) == (start, end)

        first.refresh_from_db()
        second.refresh_from_db()
        assert first.status == WaitlistEntry.Status.FULFILLED
        assert first.fulfilled_booking_id == promoted.id
        assert second.status == WaitlistEntry.Status.WAITING

    def test_cancel_does_not_promote_canceller(
        self, frozen_now, create_resource, create_booking, create_waitlist_entry, user_id
    ):
        """Test the user freeing the slot is skipped even if first in line."""
        booking = create_booking(create_resource())
        own = create_waitlist_entry(user_id=user_id, joined_at=FROZEN_NOW - timedelta(hours=2))
        other = create_waitlist_entry()

        result = self.service.cancel_booking(booking.id, user_id)

        assert result.promoted.user_id == other.user_id
        own.refresh_from_db()
        assert own.status == WaitlistEntry.Status.WAITING

    def test_promotion_scoped_to_hostel_and_type(
        self, frozen_now, create_resource, create_booking, create_waitlist_entry,
        user_id, other_hostel_id
    ):
        booking = create_booking(create_resource())
        create_waitlist_entry(hostel_id=other_hostel_id)
        create_waitlist_entry(resource_type=ResourceType.BADMINTON)

        result = self.service.cancel_booking(booking.id, user_id)

        assert result.promoted is None
        assert WaitlistEntry.objects.filter(status=WaitlistEntry.Status.WAITING).count() == 2

    def test_no_promotion_when_too_little_time_left(
        self, frozen_now, create_resource, create_booking, create_waitlist_entry, user_id, slot
    ):
        """Test a slot with under 25 usable minutes is not offered."""
        start, end = slot(10, 0)
        booking = create_booking(create_resource(), start_time=start, end_time=end)
        entry = create_waitlist_entry()
        frozen_now.set(start + timedelta(minutes=25))

        result = self.service.cancel_booking(booking.id, user_id)

        assert result.booking.status == Booking.Status.CANCELLED
        assert result.promoted is None
        entry.refresh_from_db()
        assert entry.status == WaitlistEntry.Status.WAITING

    def test_promotion_into_running_slot(
        self, frozen_now, create_resource, create_booking, create_waitlist_entry, user_id, slot
    ):
        """Test a running slot with enough time left is handed over."""
        start, end = slot(10, 0)
        booking = create_booking(create_resource(), start_time=start, end_time=end)
        entry = create_waitlist_entry()
        frozen_now.set(start + timedelta(minutes=10))

        result = self.service.cancel_booking(booking.id, user_id)

        assert result.promoted.user_id == entry.user_id
        assert result.promoted.effective_status() == Booking.Status.ACTIVE

    def test_release_of_concurrently_cancelled_booking(
        self, frozen_now, create_resource, create_booking, create_waitlist_entry, admin_id
    ):
        """Test a release that loses the race reports it and promotes nobody."""
        booking = create_booking(create_resource())
        stale = Booking.objects.get(id=booking.id)
        Booking.objects.filter(id=booking.id).update(status=Booking.Status.CANCELLED)
        entry = create_waitlist_entry()

        result = self.service.release(
            stale,
            cancelled_by=admin_id,
            cancellation_type=Booking.CancellationType.ADMIN,
            idempotent=True,
        )

        assert result.already_released is True
        assert result.promoted is None
        assert not Booking.objects.filter(origin=Booking.Origin.WAITLIST).exists()
        entry.refresh_from_db()
        assert entry.status == WaitlistEntry.Status.WAITING

    def test_claim_booking(self, frozen_now, create_resource, create_booking, user_id, slot):
        booking = create_booking(create_resource(), start_time=slot(10, 0)[0])
        frozen_now.advance(minutes=5)

        claimed = self.service.claim_booking(booking.id, user_id)

        assert claimed.is_claimed
        assert claimed.claimed_at == FROZEN_NOW + timedelta(minutes=5)

    def test_claim_is_idempotent(self, frozen_now, create_resource, create_booking, user_id, slot):
        booking = create_booking(create_resource(), start_time=slot(10, 0)[0])
        self.service.claim_booking(booking.id, user_id)
        frozen_now.advance(minutes=5)

        claimed = self.service.claim_booking(booking.id, user_id)
        assert claimed.claimed_at == FROZEN_NOW

    def test_claim_before_start(self, frozen_now, create_resource, create_booking, user_id):
        booking = create_booking(create_resource())

        with pytest.raises(ConflictError) as exc_info:
            self.service.claim_booking(booking.id, user_id)

        assert exc_info.value.code == 'BOOKING_NOT_ACTIVE'

    def test_claim_not_owner(self, frozen_now, create_resource, create_booking, other_user_id, slot):
        booking = create_booking(create_resource(), start_time=slot(10, 0)[0])

        with pytest.raises(AuthorizationError):
            self.service.claim_booking(booking.id, other_user_id)


@pytest.mark.django_db
class TestWaitlistService:
    """Tests for WaitlistService."""

    def setup_method(self):
        self.service = WaitlistService()

    def test_join(self, frozen_now, user_id, hostel_id):
        entry = self.service.join(user_id, hostel_id, ResourceType.LAUNDRY)

        assert entry.status == WaitlistEntry.Status.WAITING
        assert entry.joined_at == FROZEN_NOW
        assert self.service.queue_position(entry) == 1

    def test_join_twice(self, frozen_now, user_id, hostel_id):
        self.service.join(user_id, hostel_id, ResourceType.LAUNDRY)

        with pytest.raises(ConflictError) as exc_info:
            self.service.join(user_id, hostel_id, ResourceType.LAUNDRY)

        assert exc_info.value.code == 'ALREADY_WAITING'

    def test_join_unknown_type(self, user_id, hostel_id):
        with pytest.raises(ValidationError):
            self.service.join(user_id, hostel_id, 'SQUASH')

    def test_rejoin_after_leaving(self, frozen_now, user_id, hostel_id):
        entry = self.service.join(user_id, hostel_id, ResourceType.LAUNDRY)
        self.service.leave(entry.id, user_id)

        again = self.service.join(user_id, hostel_id, ResourceType.LAUNDRY)
        assert again.id != entry.id

    def test_leave(self, frozen_now, create_waitlist_entry, user_id):
        entry = create_waitlist_entry(user_id=user_id)

        left = self.service.leave(entry.id, user_id)

        assert left.status == WaitlistEntry.Status.CANCELLED
        assert left.cancelled_at == FROZEN_NOW

    def test_leave_not_owner(self, create_waitlist_entry, other_user_id):
        entry = create_waitlist_entry()

        with pytest.raises(AuthorizationError):
            self.service.leave(entry.id, other_user_id)

    def test_admin_can_remove_entry(self, frozen_now, create_waitlist_entry, admin_id):
        entry = create_waitlist_entry()

        left = self.service.leave(entry.id, admin_id, is_admin=True)
        assert left.status == WaitlistEntry.Status.CANCELLED

    def test_leave_closed_entry(self, create_waitlist_entry, user_id):
        entry = create_waitlist_entry(user_id=user_id, status=WaitlistEntry.Status.FULFILLED)

        with pytest.raises(ConflictError) as exc_info:
            self.service.leave(entry.id, user_id)

        assert exc_info.value.code == 'WAITLIST_ENTRY_CLOSED'

    def test_leave_unknown_entry(self, user_id):
        with pytest.raises(NotFoundError):
            self.service.leave(uuid.uuid4(), user_id)

    def test_queue_position(self, create_waitlist_entry):
        """Test positions count only earlier waiting entries of the same queue."""
        first = create_waitlist_entry(joined_at=FROZEN_NOW - timedelta(minutes=50))
        create_waitlist_entry(
            joined_at=FROZEN_NOW - timedelta(minutes=40),
            status=WaitlistEntry.Status.CANCELLED,
        )
        create_waitlist_entry(
            joined_at=FROZEN_NOW - timedelta(minutes=45),
            resource_type=ResourceType.BADMINTON,
        )
        second = create_waitlist_entry(joined_at=FROZEN_NOW - timedelta(minutes=10))
        fulfilled = create_waitlist_entry(status=WaitlistEntry.Status.FULFILLED)

        assert self.service.queue_position(first) == 1
        assert self.service.queue_position(second) == 2
        assert self.service.queue_position(fulfilled) is None

    def test_list_waiting(self, create_waitlist_entry, hostel_id):
        court = create_waitlist_entry(resource_type=ResourceType.BADMINTON)
        late = create_waitlist_entry(joined_at=FROZEN_NOW - timedelta(minutes=5))
        early = create_waitlist_entry(joined_at=FROZEN_NOW - timedelta(minutes=15))

        assert self.service.list_waiting(hostel_id) == [court, early, late]
        assert self.service.list_waiting(hostel_id, ResourceType.LAUNDRY) == [early, late]

    def test_promote_next_empty_queue(self, frozen_now, create_resource, slot):
        resource = create_resource()
        assert self.service.promote_next(ResourceType.LAUNDRY, resource.id, *slot(11, 30)) is None

    def test_promote_next_skips_failed_candidate(
        self, frozen_now, create_resource, create_booking, create_waitlist_entry, slot
    ):
        """Test a candidate whose booking is refused stays waiting and the next one is served."""
        resource = create_resource()
        start, end = slot(11, 30)
        first = create_waitlist_entry(joined_at=FROZEN_NOW - timedelta(minutes=60))
        second = create_waitlist_entry(joined_at=FROZEN_NOW - timedelta(minutes=30))
        booking = create_booking(resource, user_id=second.user_id, start_time=start, end_time=end)

        booking_service = MagicMock()
        booking_service.create_booking.side_effect = [SlotTakenError(), booking]
        service = WaitlistService(booking_service=booking_service)

        promoted = service.promote_next(ResourceType.LAUNDRY, resource.id, start, end)

        assert promoted == booking
        assert booking_service.create_booking.call_count == 2
        first.refresh_from_db()
        second.refresh_from_db()
        assert first.status == WaitlistEntry.Status.WAITING
        assert second.status == WaitlistEntry.Status.FULFILLED

    def test_promote_next_all_candidates_fail(
        self, frozen_now, create_resource, create_waitlist_entry, slot
    ):
        resource = create_resource()
        entry = create_waitlist_entry()

        booking_service = MagicMock()
        booking_service.create_booking.side_effect = ResourceUnavailableError(str(resource.id))
        service = WaitlistService(booking_service=booking_service)

        assert service.promote_next(ResourceType.LAUNDRY, resource.id, *slot(11, 30)) is None
        entry.refresh_from_db()
        assert entry.status == WaitlistEntry.Status.WAITING


@pytest.mark.django_db
class TestControlService:
    """Tests for ControlService."""

    def setup_method(self):
        self.service = ControlService()

    def test_force_release(
        self, frozen_now, create_resource, create_booking, create_waitlist_entry, admin_id
    ):
        """Test an admin frees any booking and the queue head is promoted."""
        booking = create_booking(create_resource())
        entry = create_waitlist_entry()

        result = self.service.force_release(booking.id, admin_id)

        assert result.already_released is False
        assert result.booking.status == Booking.Status.CANCELLED
        assert result.booking.cancellation_type == Booking.CancellationType.ADMIN
        assert result.booking.cancelled_by == admin_id
        assert result.promoted.user_id == entry.user_id

    def test_force_release_is_idempotent(
        self, frozen_now, create_resource, create_booking, create_waitlist_entry, admin_id
    ):
        """Test releasing twice promotes only once."""
        booking = create_booking(create_resource())
        create_waitlist_entry()
        create_waitlist_entry()

        self.service.force_release(booking.id, admin_id)
        again = self.service.force_release(booking.id, admin_id)

        assert again.already_released is True
        assert again.promoted is None
        assert Booking.objects.filter(origin=Booking.Origin.WAITLIST).count() == 1
        assert WaitlistEntry.objects.filter(status=WaitlistEntry.Status.WAITING).count() == 1

    def test_force_release_completed_booking(
        self, frozen_now, create_resource, create_booking, admin_id, slot
    ):
        booking = create_booking(create_resource(), start_time=slot(8, 30)[0])

        with pytest.raises(ConflictError):
            self.service.force_release(booking.id, admin_id)

    def test_force_release_unknown_booking(self, admin_id):
        with pytest.raises(NotFoundError):
            self.service.force_release(uuid.uuid4(), admin_id)

    def test_bypass_queue(
        self, frozen_now, create_resource, create_waitlist_entry, user_id, admin_id, slot
    ):
        """Test a direct assignment leaves the waitlist untouched."""
        resource = create_resource()
        entry = create_waitlist_entry()

        booking = self.service.bypass_queue(user_id, resource.id, *slot(11, 30), admin_id=admin_id)

        assert booking.origin == Booking.Origin.BYPASS
        assert booking.user_id == user_id
        assert booking.created_by == admin_id
        entry.refresh_from_db()
        assert entry.status == WaitlistEntry.Status.WAITING

    def test_bypass_queue_into_running_slot(
        self, frozen_now, create_resource, user_id, admin_id, slot
    ):
        frozen_now.set(FROZEN_NOW + timedelta(minutes=20))

        booking = self.service.bypass_queue(user_id, create_resource().id, *slot(10, 0), admin_id=admin_id)
        assert booking.effective_status() == Booking.Status.ACTIVE

    def test_bypass_queue_respects_overlap(
        self, frozen_now, create_resource, create_booking, user_id, admin_id, slot
    ):
        resource = create_resource()
        create_booking(resource, user_id=uuid.uuid4(), start_time=slot(11, 30)[0])

        with pytest.raises(SlotTakenError):
            self.service.bypass_queue(user_id, resource.id, *slot(11, 30), admin_id=admin_id)

    def test_bypass_queue_respects_maintenance(
        self, frozen_now, create_resource, user_id, admin_id, slot
    ):
        resource = create_resource(is_operational=False)

        with pytest.raises(ResourceUnavailableError):
            self.service.bypass_queue(user_id, resource.id, *slot(11, 30), admin_id=admin_id)

    def test_bypass_queue_under_maintenance_rejects_any_window(
        self, frozen_now, create_resource, user_id, admin_id, slot
    ):
        resource = create_resource(is_operational=False, maintenance_reason='motor repair')

        for window in (slot(12, 0), slot(8, 30)):
            with pytest.raises(ConflictError) as exc_info:
                self.service.bypass_queue(user_id, resource.id, *window, admin_id=admin_id)

            assert exc_info.value.code == 'RESOURCE_UNDER_MAINTENANCE'

    def test_live_status(self, frozen_now, create_resource, create_booking, user_id, slot):
        resource = create_resource()
        create_booking(resource, start_time=slot(10, 0)[0])
        frozen_now.advance(minutes=10)

        _, live = self.service.get_live_status(resource.id)

        assert live.status == LiveStatus.IN_USE
        assert live.current_user_id == user_id

    def test_list_with_status(self, frozen_now, create_resource, create_booking, hostel_id, slot):
        """Test every resource of the hostel is paired with its own status."""
        busy = create_resource(name='Washer 1')
        idle = create_resource(name='Washer 2')
        broken = create_resource(name='Washer 3', is_operational=False)
        create_booking(busy, start_time=slot(10, 0)[0])

        statuses = {
            resource.id: live.status
            for resource, live in self.service.list_with_status(hostel_id)
        }

        assert statuses == {
            busy.id: LiveStatus.IN_USE,
            idle.id: LiveStatus.AVAILABLE,
            broken.id: LiveStatus.MAINTENANCE,
        }

    def test_active_bookings(self, frozen_now, create_resource, create_booking, hostel_id, slot):
        resource = create_resource()
        create_booking(resource, start_time=slot(8, 30)[0])
        running = create_booking(resource, start_time=slot(10, 0)[0])
        later = create_booking(resource, start_time=slot(11, 30)[0])
        create_booking(resource, start_time=slot(12, 15)[0], status=Booking.Status.CANCELLED)

        assert self.service.active_bookings(hostel_id) == [running, later]

    def test_forfeit_unclaimed(
        self, frozen_now, create_resource, create_booking, create_waitlist_entry, slot
    ):
        """Test no-shows past the grace period lose the slot to the queue."""
        frozen_now.set(FROZEN_NOW - timedelta(hours=1))
        resource = create_resource()
        no_show = create_booking(resource, start_time=slot(10, 0)[0])
        entry = create_waitlist_entry()
        frozen_now.set(FROZEN_NOW + timedelta(minutes=16))

        results = self.service.forfeit_unclaimed()

        assert [r.booking.id for r in results] == [no_show.id]
        assert results[0].booking.cancellation_type == Booking.CancellationType.FORFEITED
        assert results[0].promoted.user_id == entry.user_id

    def test_forfeit_skips_claimed_and_fresh_bookings(
        self, frozen_now, create_resource, create_booking, slot
    ):
        """Test claimed bookings and bookings still inside the grace period survive."""
        frozen_now.set(FROZEN_NOW - timedelta(hours=1))
        claimed = create_booking(
            create_resource(name='Washer 1'),
            start_time=slot(10, 0)[0],
            claimed_at=FROZEN_NOW,
        )
        frozen_now.set(FROZEN_NOW + timedelta(minutes=10))
        fresh = create_booking(create_resource(name='Washer 2'), start_time=slot(10, 0)[0])
        frozen_now.set(FROZEN_NOW + timedelta(minutes=16))

        assert self.service.forfeit_unclaimed() == []

        claimed.refresh_from_db()
        fresh.refresh_from_db()
        assert claimed.status == Booking.Status.CONFIRMED
        assert fresh.status == Booking.Status.CONFIRMED


@pytest.mark.django_db
class TestForfeitTask:
    """Tests for the periodic forfeiture task."""

    def test_task_disabled(self, settings):
        from apps.core.tasks import forfeit_unclaimed_bookings

        settings.LAUNDRY = {**settings.LAUNDRY, 'FORFEIT_UNCLAIMED': False}

        assert forfeit_unclaimed_bookings() == {'enabled': False, 'forfeited': 0, 'promoted': 0}

    def test_task_forfeits(self, frozen_now, create_resource, create_booking, create_waitlist_entry, slot):
        from apps.core.tasks import forfeit_unclaimed_bookings

        frozen_now.set(FROZEN_NOW - timedelta(hours=1))
        create_booking(create_resource(), start_time=slot(10, 0)[0])
        create_waitlist_entry()
        frozen_now.set(FROZEN_NOW + timedelta(minutes=16))

        assert forfeit_unclaimed_bookings() == {'enabled': True, 'forfeited': 1, 'promoted': 1}
