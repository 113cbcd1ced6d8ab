from django.contrib import admin

from .models import Booking, Resource, WaitlistEntry


@admin.register(Resource)
class ResourceAdmin(admin.ModelAdmin):
    list_display = ['name', 'resource_type', 'hostel_id', 'is_operational', 'maintenance_reason']
    list_filter = ['resource_type', 'is_operational']
    search_fields = ['name']


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['resource', 'user_id', 'start_time', 'end_time', 'status', 'origin', 'claimed_at']
    list_filter = ['status', 'origin', 'cancellation_type']
    search_fields = ['user_id']
    date_hierarchy = 'start_time'
    raw_id_fields = ['resource']


@admin.register(WaitlistEntry)
class WaitlistEntryAdmin(admin.ModelAdmin):
    list_display = ['user_id', 'hostel_id', 'resource_type', 'status', 'joined_at', 'fulfilled_at']
    list_filter = ['resource_type', 'status']
    raw_id_fields = ['fulfilled_booking']
