"""
Serializers for the phone tracker API.

Input serializers only decode request payloads into Python types; range
and emptiness checks belong to ``phone_tracker.validation`` and run inside
the service call. Output serializers render devices and samples in the
wire format clients expect.
"""
from rest_framework import serializers

from .models import Device, DeviceLocation, LocationSample


class StrictFloatField(serializers.FloatField):
    """FloatField that only accepts JSON numbers, not booleans or numeric strings."""

    def to_internal_value(self, data: object) -> float:
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            self.fail('invalid')
        return super().to_internal_value(data)


class StrictIntegerField(serializers.IntegerField):
    """IntegerField that only accepts JSON numbers, not booleans or numeric strings."""

    def to_internal_value(self, data: object) -> int:
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            self.fail('invalid')
        return super().to_internal_value(data)


class StrictCharField(serializers.CharField):
    """CharField that does not coerce numbers to text."""

    def to_internal_value(self, data: object) -> str:
        if not isinstance(data, str):
            self.fail('invalid')
        return super().to_internal_value(data)


class DeviceSerializer(serializers.ModelSerializer):
    """Serializer for Device model."""

    device_name = serializers.CharField(source='display_name', read_only=True)

    class Meta:
        model = Device
        fields = ['id', 'device_id', 'device_name', 'phone_number', 'last_seen_at', 'created_at']


class LocationSampleSerializer(serializers.ModelSerializer):
    """Serializer for LocationSample model."""

    device_ref = serializers.IntegerField(source='device_id', read_only=True)

    class Meta:
        model = LocationSample
        fields = [
            'id', 'device_ref',
            'latitude', 'longitude', 'accuracy', 'altitude', 'battery_level',
            'recorded_at', 'created_at',
        ]


class DeviceLocationSerializer(serializers.Serializer):
    """Render a device merged with its latest sample."""

    def to_representation(self, instance: DeviceLocation) -> dict:
        data = dict(DeviceSerializer(instance.device).data)
        data['last_location'] = (
            LocationSampleSerializer(instance.last_location).data
            if instance.last_location is not None
            else None
        )
        return data


class RegisterPhoneSerializer(serializers.Serializer):
    """Request body of ``registerPhone``."""

    device_id = StrictCharField(trim_whitespace=False, allow_blank=True)
    device_name = StrictCharField(trim_whitespace=False, allow_blank=True)
    phone_number = StrictCharField(
        trim_whitespace=False, allow_blank=True, allow_null=True, required=False, default=None
    )


class UpdateLocationSerializer(serializers.Serializer):
    """Request body of ``updateLocation``."""

    device_id = StrictCharField(trim_whitespace=False, allow_blank=True)
    latitude = StrictFloatField()
    longitude = StrictFloatField()
    accuracy = StrictFloatField(allow_null=True, required=False, default=None)
    altitude = StrictFloatField(allow_null=True, required=False, default=None)
    battery_level = StrictIntegerField(allow_null=True, required=False, default=None)


class DeviceLookupSerializer(serializers.Serializer):
    """Query parameters of ``getPhoneLocation`` and ``getLocationHistory``."""

    device_id = StrictCharField(trim_whitespace=False, allow_blank=True)
