# services/laundry-service/src/apps/api/serializers/analytics_serializers.py
"""
Analytics Serializers
"""

from rest_framework import serializers

from apps.core.models import ResourceType


class HostelQuerySerializer(serializers.Serializer):
    """Optional hostel scope; defaults to the caller's hostel."""

    hostel_id = serializers.UUIDField(required=False)


class ResourceListQuerySerializer(HostelQuerySerializer):
    resource_type = serializers.ChoiceField(choices=ResourceType.choices, required=False)


class FlakeRateSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    confirmed = serializers.IntegerField()
    active = serializers.IntegerField()
    completed = serializers.IntegerField()
    cancelled = serializers.IntegerField()
    flake_rate = serializers.FloatField()


class HeatmapCellSerializer(serializers.Serializer):
    day_of_week = serializers.IntegerField(min_value=0, max_value=6)
    hour = serializers.IntegerField(min_value=0, max_value=23)
    count = serializers.IntegerField()


class TurnaroundSerializer(serializers.Serializer):
    total_fulfilled = serializers.IntegerField()
    avg_wait_minutes = serializers.FloatField()
