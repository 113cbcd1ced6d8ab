# services/laundry-service/src/apps/api/serializers/resource_serializers.py
"""
Resource Serializers
"""

from rest_framework import serializers

from apps.core.models import Resource, ResourceType


class ResourceSerializer(serializers.ModelSerializer):
    """Resource with its live status (passed in context as ``live_status``)."""

    resource_type_display = serializers.CharField(
        source='get_resource_type_display',
        read_only=True
    )
    live_status = serializers.SerializerMethodField()

    class Meta:
        model = Resource
        fields = [
            'id', 'hostel_id', 'name',
            'resource_type', 'resource_type_display',
            'is_operational', 'maintenance_reason',
            'live_status',
            'created_at', 'updated_at',
        ]

    def get_live_status(self, obj) -> dict:
        status = self.context.get('live_status', {}).get(obj.id)
        return status.to_dict() if status else None


class ResourceCreateSerializer(serializers.Serializer):
    """Admin request to register a resource."""

    hostel_id = serializers.UUIDField(required=False)
    name = serializers.CharField(max_length=100)
    resource_type = serializers.ChoiceField(
        choices=ResourceType.choices,
        default=ResourceType.LAUNDRY
    )

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("Name must not be blank.")
        return value.strip()


class MaintenanceUpdateSerializer(serializers.Serializer):
    """Admin request to put a resource into or out of maintenance."""

    is_operational = serializers.BooleanField()
    maintenance_reason = serializers.CharField(
        max_length=255,
        required=False,
        allow_blank=True,
        allow_null=True
    )

    def validate(self, attrs):
        if attrs['is_operational']:
            attrs['maintenance_reason'] = None
        return attrs
