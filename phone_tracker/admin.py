"""Django admin configuration for phone_tracker app."""
from typing import Any

from django.contrib import admin
from django.http import HttpRequest

from .models import Device, LocationSample


@admin.register(Device)
class DeviceAdmin(admin.ModelAdmin):
    """Admin interface for Device model."""

    list_display: tuple[str, ...] = ('device_id', 'display_name', 'phone_number', 'last_seen_at', 'created_at')
    list_filter: tuple[str, ...] = ('created_at', 'last_seen_at')
    search_fields: tuple[str, ...] = ('device_id', 'display_name', 'phone_number')
    readonly_fields: tuple[str, ...] = ('device_id', 'created_at', 'last_seen_at')


@admin.register(LocationSample)
class LocationSampleAdmin(admin.ModelAdmin):
    """Read-only admin interface for LocationSample model."""

    list_display: tuple[str, ...] = (
        'device',
        'latitude',
        'longitude',
        'recorded_at',
        'accuracy',
        'battery_level',
    )
    list_filter: tuple[str, ...] = ('device', 'recorded_at')
    search_fields: tuple[str, ...] = ('device__device_id', 'device__display_name')
    date_hierarchy: str = 'recorded_at'

    # Samples are immutable once ingested
    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_change_permission(self, request: HttpRequest, obj: Any = None) -> bool:
        return False
