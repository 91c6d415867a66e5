"""
Database models for phone location tracking.

This module defines the data models for storing registered devices
and the location samples they report.
"""
from dataclasses import dataclass

from django.db import models
from django.db.models import Q
from django.utils import timezone

from .validation import (DEVICE_ID_MAX_LENGTH, DISPLAY_NAME_MAX_LENGTH,
                         PHONE_NUMBER_MAX_LENGTH)


class Device(models.Model):
    """
    Represents a registered phone or tracking unit.

    Each device is uniquely identified by its device_id, an external
    identifier (IMEI, UUID, ...) supplied by the client at registration.
    """

    device_id = models.CharField(
        max_length=DEVICE_ID_MAX_LENGTH,
        unique=True,
        help_text="External device identifier (IMEI, device UUID, etc.)"
    )
    display_name = models.CharField(
        max_length=DISPLAY_NAME_MAX_LENGTH,
        help_text="Friendly name for the device"
    )
    phone_number = models.CharField(
        max_length=PHONE_NUMBER_MAX_LENGTH,
        null=True,
        blank=True,
        help_text="Optional phone number of the device"
    )
    last_seen_at = models.DateTimeField(
        default=timezone.now,
        help_text="Last registration or location update from this device"
    )
    created_at = models.DateTimeField(
        default=timezone.now,
        editable=False,
        help_text="When this device was first registered"
    )

    class Meta:
        db_table = 'devices'
        ordering = ['-last_seen_at']
        verbose_name = 'Device'
        verbose_name_plural = 'Devices'

    def __str__(self) -> str:
        """Return string representation of the device."""
        return f"{self.display_name} ({self.device_id})"


class LocationSample(models.Model):
    """
    Represents a single location reading reported by a device.

    Samples are written once by location ingestion and never changed.
    """

    device = models.ForeignKey(
        Device,
        on_delete=models.CASCADE,
        related_name='locations',
        db_column='device_ref',
        help_text="The device that reported this location"
    )

    latitude = models.FloatField(
        help_text="Latitude in decimal degrees (-90 to +90)"
    )
    longitude = models.FloatField(
        help_text="Longitude in decimal degrees (-180 to +180)"
    )
    accuracy = models.FloatField(
        null=True,
        blank=True,
        help_text="Accuracy of the fix in meters"
    )
    altitude = models.FloatField(
        null=True,
        blank=True,
        help_text="Altitude in meters, negative below sea level"
    )
    battery_level = models.IntegerField(
        null=True,
        blank=True,
        help_text="Battery percentage 0-100"
    )

    recorded_at = models.DateTimeField(
        help_text="Server time at which the sample was ingested"
    )
    created_at = models.DateTimeField(
        default=timezone.now,
        editable=False,
        help_text="When this row was written"
    )

    class Meta:
        db_table = 'locations'
        ordering = ['-recorded_at', '-id']
        verbose_name = 'Location sample'
        verbose_name_plural = 'Location samples'
        indexes = [
            models.Index(fields=['device', '-recorded_at', '-id'], name='locations_device_recent_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(latitude__gte=-90) & Q(latitude__lte=90),
                name='locations_latitude_range',
            ),
            models.CheckConstraint(
                condition=Q(longitude__gte=-180) & Q(longitude__lte=180),
                name='locations_longitude_range',
            ),
            # Stored rows may carry a zero accuracy; new input must be positive
            models.CheckConstraint(
                condition=Q(accuracy__isnull=True) | Q(accuracy__gte=0),
                name='locations_accuracy_non_negative',
            ),
            models.CheckConstraint(
                condition=Q(battery_level__isnull=True) | (Q(battery_level__gte=0) & Q(battery_level__lte=100)),
                name='locations_battery_level_range',
            ),
        ]

    def __str__(self) -> str:
        """Return string representation of the sample."""
        return f"{self.device.device_id} @ ({self.latitude}, {self.longitude}) on {self.recorded_at}"


@dataclass(frozen=True)
class DeviceLocation:
    """A device together with its most recent sample, if it has any."""

    device: Device
    last_location: LocationSample | None
