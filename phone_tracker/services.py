"""
Tracker operations: device registration, location ingestion and queries.

Each operation validates its input first, then runs as a single
transaction on the database alias passed as ``using``. Database
exceptions leave an operation only as ``TrackerError`` subclasses.
"""
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, IntegrityError, connections, transaction
from django.utils import timezone

from .errors import DataIntegrityError, NotFound, translate_store_errors
from .models import Device, DeviceLocation, LocationSample
from .validation import (validate_accuracy, validate_altitude,
                         validate_battery_level, validate_device_id,
                         validate_display_name, validate_latitude,
                         validate_longitude, validate_phone_number)

logger = logging.getLogger(__name__)

REGISTER_PHONE = 'registerPhone'
UPDATE_LOCATION = 'updateLocation'
GET_PHONE_LOCATION = 'getPhoneLocation'
GET_LOCATION_HISTORY = 'getLocationHistory'

# Smallest step the stored timestamps can resolve
_TICK = timedelta(microseconds=1)


def _advance(previous: datetime | None, now: datetime) -> datetime:
    """Return ``now``, or the instant just after ``previous`` if the clock has not moved past it."""
    if previous is None or now > previous:
        return now
    return previous + _TICK


def _apply_statement_timeout(using: str) -> None:
    """Bound every statement of the current transaction on backends that support it.

    SQLite gets its bound from the ``timeout`` connection option instead.
    """
    connection = connections[using]
    if connection.vendor != 'postgresql':
        return
    timeout_ms = int(float(getattr(settings, 'TRACKER_STORE_TIMEOUT', 5.0)) * 1000)
    with connection.cursor() as cursor:
        cursor.execute("SELECT set_config('statement_timeout', %s, true)", [str(timeout_ms)])


@contextmanager
def _store_transaction(operation: str, device_id: str, using: str) -> Iterator[None]:
    """Run the block in one transaction and translate any store failure."""
    with translate_store_errors(operation, device_id):
        with transaction.atomic(using=using):
            _apply_statement_timeout(using)
            yield


def _matching_devices(device_id: str, using: str, for_update: bool = False) -> list[Device]:
    queryset = Device.objects.using(using).filter(device_id=device_id)
    if for_update:
        queryset = queryset.select_for_update()
    # Two rows are enough to detect a duplicate
    return list(queryset[:2])


def _find_device(
    device_id: str,
    operation: str,
    using: str,
    for_update: bool = False,
) -> Device | None:
    """
    Look up the device registered under ``device_id``.

    Returns:
        The device, or None if nothing is registered under that identifier

    Raises:
        DataIntegrityError: If more than one row carries the identifier
    """
    devices = _matching_devices(device_id, using, for_update=for_update)
    if len(devices) > 1:
        logger.error("Duplicate rows for device %s found during %s", device_id, operation)
        raise DataIntegrityError(
            f"Found more than one device registered as '{device_id}' during {operation}",
            device_id=device_id,
            operation=operation,
        )
    return devices[0] if devices else None


def _touch_device(device: Device, seen_at: datetime, using: str) -> None:
    device.last_seen_at = seen_at
    device.save(using=using, update_fields=['last_seen_at'])


def register_device(
    device_id: str,
    display_name: str,
    phone_number: str | None = None,
    *,
    using: str = DEFAULT_DB_ALIAS,
) -> Device:
    """
    Register a device, or refresh it if ``device_id`` is already known.

    A new device gets ``created_at`` and ``last_seen_at`` set to the same
    instant. A known device keeps its identity and creation time; its
    name and phone number are replaced and ``last_seen_at`` advances.

    Args:
        device_id: External identifier of the device
        display_name: Friendly name, must not be blank
        phone_number: Optional phone number; blank is stored as null
        using: Database alias to run against

    Returns:
        The device row as it stands after the call

    Raises:
        InvalidArgument: If the identifier or name is blank
        DataIntegrityError: If the store holds duplicate rows for the identifier
        StoreUnavailable: If the store cannot be reached
    """
    device_id = validate_device_id(device_id)
    display_name = validate_display_name(display_name)
    phone_number = validate_phone_number(phone_number)

    with _store_transaction(REGISTER_PHONE, device_id, using):
        device = _find_device(device_id, REGISTER_PHONE, using, for_update=True)
        if device is None:
            now = timezone.now()
            try:
                with transaction.atomic(using=using):
                    device = Device.objects.using(using).create(
                        device_id=device_id,
                        display_name=display_name,
                        phone_number=phone_number,
                        last_seen_at=now,
                        created_at=now,
                    )
            except IntegrityError:
                # Lost the insert race to a concurrent registration
                device = _find_device(device_id, REGISTER_PHONE, using, for_update=True)
                if device is None:
                    raise
                logger.debug("Device %s was registered concurrently, updating it", device_id)
            else:
                logger.info("New device registered: %s (%s)", device_id, display_name)
                return device

        device.display_name = display_name
        device.phone_number = phone_number
        device.last_seen_at = _advance(device.last_seen_at, timezone.now())
        device.save(using=using, update_fields=['display_name', 'phone_number', 'last_seen_at'])

    logger.debug("Device re-registered: %s", device_id)
    return device


def update_location(
    device_id: str,
    latitude: float,
    longitude: float,
    accuracy: float | None = None,
    altitude: float | None = None,
    battery_level: int | None = None,
    *,
    using: str = DEFAULT_DB_ALIAS,
) -> LocationSample:
    """
    Record a location sample for a registered device.

    The sample insert and the device's ``last_seen_at`` update commit
    together or not at all. ``recorded_at`` is the server time of the
    write; devices cannot supply their own timestamp.

    Args:
        device_id: External identifier of a registered device
        latitude: Degrees in [-90, 90]
        longitude: Degrees in [-180, 180]
        accuracy: Optional accuracy in meters, strictly positive
        altitude: Optional altitude in meters
        battery_level: Optional battery percentage 0-100
        using: Database alias to run against

    Returns:
        The stored location sample

    Raises:
        InvalidArgument: If any input is out of range
        NotFound: If no device is registered under ``device_id``
        DataIntegrityError: On duplicate device rows or a violated constraint
        StoreUnavailable: If the store cannot be reached
    """
    device_id = validate_device_id(device_id)
    latitude = validate_latitude(latitude)
    longitude = validate_longitude(longitude)
    accuracy = validate_accuracy(accuracy)
    altitude = validate_altitude(altitude)
    battery_level = validate_battery_level(battery_level)

    with _store_transaction(UPDATE_LOCATION, device_id, using):
        device = _find_device(device_id, UPDATE_LOCATION, using, for_update=True)
        if device is None:
            logger.info("Rejected location for unregistered device %s", device_id)
            raise NotFound(
                f"Device '{device_id}' is not registered; {UPDATE_LOCATION} requires registration first",
                device_id=device_id,
                operation=UPDATE_LOCATION,
            )

        now = _advance(device.last_seen_at, timezone.now())
        sample = LocationSample.objects.using(using).create(
            device=device,
            latitude=latitude,
            longitude=longitude,
            accuracy=accuracy,
            altitude=altitude,
            battery_level=battery_level,
            recorded_at=now,
            created_at=now,
        )
        _touch_device(device, now, using)

    logger.info(
        "Location stored for %s: (%s, %s) battery=%s",
        device_id, latitude, longitude, battery_level,
    )
    return sample


def get_latest_location(device_id: str, *, using: str = DEFAULT_DB_ALIAS) -> DeviceLocation:
    """
    Return a registered device together with its most recent sample.

    The latest sample is the one with the greatest ``recorded_at``; equal
    timestamps fall back to insertion order. A device without samples is
    returned with ``last_location`` set to None.

    Raises:
        InvalidArgument: If ``device_id`` is blank
        NotFound: If no device is registered under ``device_id``
    """
    device_id = validate_device_id(device_id)

    with _store_transaction(GET_PHONE_LOCATION, device_id, using):
        device = _find_device(device_id, GET_PHONE_LOCATION, using)
        if device is None:
            raise NotFound(
                f"Device '{device_id}' is not registered",
                device_id=device_id,
                operation=GET_PHONE_LOCATION,
            )
        latest = (
            LocationSample.objects.using(using)
            .filter(device=device)
            .order_by('-recorded_at', '-id')
            .first()
        )

    return DeviceLocation(device=device, last_location=latest)


def get_location_history(device_id: str, *, using: str = DEFAULT_DB_ALIAS) -> list[LocationSample]:
    """
    Return every sample of a device, newest first.

    An unknown device yields an empty list, the same as a known device
    that has not reported yet.
    """
    device_id = validate_device_id(device_id)

    with _store_transaction(GET_LOCATION_HISTORY, device_id, using):
        device = _find_device(device_id, GET_LOCATION_HISTORY, using)
        if device is None:
            return []
        return list(
            LocationSample.objects.using(using)
            .filter(device=device)
            .order_by('-recorded_at', '-id')
        )
