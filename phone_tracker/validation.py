"""
Input checks for the tracker operations.

Every function here is pure: it looks only at its arguments, returns the
normalized value and raises ``InvalidArgument`` on bad input. They run
before any database transaction is opened.
"""
import math
from numbers import Real
from typing import Any

from .errors import InvalidArgument

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)
BATTERY_LEVEL_RANGE = (0, 100)

# Column widths of the devices table
DEVICE_ID_MAX_LENGTH = 100
DISPLAY_NAME_MAX_LENGTH = 200
PHONE_NUMBER_MAX_LENGTH = 50


def _require_length(value: str, field: str, max_length: int) -> str:
    if len(value) > max_length:
        raise InvalidArgument(
            f"Expected {field} of at most {max_length} characters, got {len(value)}",
            field=field,
        )
    return value


def _require_text(value: Any, field: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise InvalidArgument(
            f"Expected {field} to be a string, got {type(value).__name__}",
            field=field,
        )
    stripped = value.strip()
    if not stripped:
        raise InvalidArgument(f"Expected non-empty {field}, got '{value}'", field=field)
    return _require_length(stripped, field, max_length)


def _require_number(value: Any, field: str) -> float:
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidArgument(
            f"Expected {field} to be a number, got {type(value).__name__}",
            field=field,
        )
    number = float(value)
    if math.isnan(number):
        raise InvalidArgument(f"Expected {field} to be a number, got NaN", field=field)
    return number


def validate_device_id(device_id: Any) -> str:
    """Return the trimmed device identifier."""
    return _require_text(device_id, 'device_id', DEVICE_ID_MAX_LENGTH)


def validate_display_name(display_name: Any) -> str:
    """Return the trimmed display name."""
    return _require_text(display_name, 'display_name', DISPLAY_NAME_MAX_LENGTH)


def validate_phone_number(phone_number: Any) -> str | None:
    """Return the trimmed phone number, or None when absent or blank."""
    if phone_number is None:
        return None
    if not isinstance(phone_number, str):
        raise InvalidArgument(
            f"Expected phone_number to be a string or null, got {type(phone_number).__name__}",
            field='phone_number',
        )
    stripped = phone_number.strip()
    if not stripped:
        return None
    return _require_length(stripped, 'phone_number', PHONE_NUMBER_MAX_LENGTH)


def validate_latitude(latitude: Any) -> float:
    """Return the latitude if it lies within [-90, 90]."""
    value = _require_number(latitude, 'latitude')
    low, high = LATITUDE_RANGE
    if not low <= value <= high:
        raise InvalidArgument(
            f"Expected latitude between -90 and +90 degrees, got {latitude}",
            field='latitude',
        )
    return value


def validate_longitude(longitude: Any) -> float:
    """Return the longitude if it lies within [-180, 180]."""
    value = _require_number(longitude, 'longitude')
    low, high = LONGITUDE_RANGE
    if not low <= value <= high:
        raise InvalidArgument(
            f"Expected longitude between -180 and +180 degrees, got {longitude}",
            field='longitude',
        )
    return value


def validate_accuracy(accuracy: Any) -> float | None:
    """Return the accuracy in meters; it must be strictly positive when given."""
    if accuracy is None:
        return None
    value = _require_number(accuracy, 'accuracy')
    if not value > 0 or math.isinf(value):
        raise InvalidArgument(
            f"Expected a positive accuracy in meters, got {accuracy}",
            field='accuracy',
        )
    return value


def validate_altitude(altitude: Any) -> float | None:
    """Return the altitude in meters; any finite value is accepted."""
    if altitude is None:
        return None
    value = _require_number(altitude, 'altitude')
    if math.isinf(value):
        raise InvalidArgument(f"Expected a finite altitude, got {altitude}", field='altitude')
    return value


def validate_battery_level(battery_level: Any) -> int | None:
    """Return the battery percentage if it is an integer within [0, 100]."""
    if battery_level is None:
        return None
    if isinstance(battery_level, bool) or not isinstance(battery_level, int):
        raise InvalidArgument(
            f"Expected battery level to be an integer, got {battery_level!r}",
            field='battery_level',
        )
    low, high = BATTERY_LEVEL_RANGE
    if not low <= battery_level <= high:
        raise InvalidArgument(
            f"Expected battery level between 0 and 100, got {battery_level}",
            field='battery_level',
        )
    return battery_level
