# services/laundry-service/src/apps/api/serializers/waitlist_serializers.py
"""
Waitlist Serializers
"""

from rest_framework import serializers

from apps.core.models import ResourceType, WaitlistEntry


class WaitlistEntrySerializer(serializers.ModelSerializer):
    """Waitlist entry; ``position`` comes from the ``positions`` context map."""

    position = serializers.SerializerMethodField()
    wait_minutes = serializers.FloatField(read_only=True)

    class Meta:
        model = WaitlistEntry
        fields = [
            'id', 'user_id', 'hostel_id', 'resource_type',
            'status', 'position',
            'joined_at', 'fulfilled_at', 'fulfilled_booking', 'cancelled_at',
            'wait_minutes',
        ]

    def get_position(self, obj):
        return self.context.get('positions', {}).get(obj.id)


class WaitlistJoinSerializer(serializers.Serializer):
    resource_type = serializers.ChoiceField(
        choices=ResourceType.choices,
        default=ResourceType.LAUNDRY
    )


class WaitlistQuerySerializer(serializers.Serializer):
    hostel_id = serializers.UUIDField(required=False)
    resource_type = serializers.ChoiceField(choices=ResourceType.choices, required=False)
