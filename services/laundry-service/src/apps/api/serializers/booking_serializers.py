# services/laundry-service/src/apps/api/serializers/booking_serializers.py
"""
Booking Serializers

Output serializers report the status as of now; request serializers are
one per operation.
"""

from rest_framework import serializers

from apps.core.models import Booking


class BookingSerializer(serializers.ModelSerializer):
    """Booking with its current status."""

    status = serializers.SerializerMethodField()
    resource_name = serializers.CharField(source='resource.name', read_only=True)
    resource_type = serializers.CharField(source='resource.resource_type', read_only=True)
    is_claimed = serializers.BooleanField(read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id', 'resource_id', 'resource_name', 'resource_type',
            'user_id', 'start_time', 'end_time',
            'status', 'origin',
            'is_claimed', 'claimed_at',
            'cancelled_at', 'cancelled_by', 'cancellation_type',
            'created_by', 'created_at',
        ]

    def get_status(self, obj) -> str:
        return obj.effective_status()


class BookingCreateSerializer(serializers.Serializer):
    """Resident request to book a slot for themselves."""

    resource_id = serializers.UUIDField()
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()

    def validate(self, attrs):
        if attrs['end_time'] <= attrs['start_time']:
            raise serializers.ValidationError({
                'end_time': 'End time must be after start time.'
            })
        return attrs


class BypassQueueSerializer(BookingCreateSerializer):
    """Admin request to assign a slot to a user directly."""

    user_id = serializers.UUIDField()


class ReleaseResultSerializer(serializers.Serializer):
    """Outcome of a cancellation or force release."""

    booking = BookingSerializer(read_only=True)
    promoted = BookingSerializer(read_only=True, allow_null=True)
    already_released = serializers.BooleanField(read_only=True)


class SlotSerializer(serializers.Serializer):
    start_time = serializers.DateTimeField(source='start', read_only=True)
    end_time = serializers.DateTimeField(source='end', read_only=True)


class SlotQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
