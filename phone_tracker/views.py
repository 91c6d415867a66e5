"""
API views for phone location tracking.

Each action is one named procedure: it decodes the request with a
serializer, calls the matching operation in ``phone_tracker.services``
and renders the result. Failures are rendered by
``phone_tracker.exception_handlers.tracker_exception_handler``.
"""
import logging
from datetime import UTC, datetime

from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response

from . import services
from .serializers import (DeviceLocationSerializer, DeviceLookupSerializer,
                          DeviceSerializer, LocationSampleSerializer,
                          RegisterPhoneSerializer, UpdateLocationSerializer)

logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> str:
    """Return the client address, honouring X-Forwarded-For when present."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', 'unknown')


class TrackerViewSet(viewsets.ViewSet):
    """
    Procedures of the tracking API.

    Provides endpoints for:
    - GET healthcheck: Liveness check
    - POST registerPhone: Register or refresh a device
    - POST updateLocation: Store a location sample for a device
    - GET getPhoneLocation: Device with its latest sample
    - GET getLocationHistory: All samples of a device, newest first
    """

    permission_classes = [AllowAny]

    # Action name -> procedure name used in error bodies
    procedure_names: dict[str, str] = {
        'register_phone': services.REGISTER_PHONE,
        'update_location': services.UPDATE_LOCATION,
        'get_phone_location': services.GET_PHONE_LOCATION,
        'get_location_history': services.GET_LOCATION_HISTORY,
    }

    def healthcheck(self, request: Request) -> Response:
        """Report that the service is up."""
        return Response({
            'status': 'ok',
            'timestamp': datetime.now(UTC).isoformat(),
        })

    def register_phone(self, request: Request) -> Response:
        """
        Register a device or refresh its details.

        Request body:
            {
                "device_id": "356938035643809",
                "device_name": "Alice's phone",
                "phone_number": "+15555550100"
            }

        Returns:
            200: The device record
            400: Blank device_id or device_name
        """
        serializer = RegisterPhoneSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        logger.debug("registerPhone from %s: %s", get_client_ip(request), data['device_id'])
        device = services.register_device(
            data['device_id'],
            data['device_name'],
            data.get('phone_number'),
        )
        return Response(DeviceSerializer(device).data, status=status.HTTP_200_OK)

    def update_location(self, request: Request) -> Response:
        """
        Store a location sample for a registered device.

        Request body:
            {
                "device_id": "356938035643809",
                "latitude": 51.5074,
                "longitude": -0.1278,
                "accuracy": 12.5,
                "altitude": null,
                "battery_level": 80
            }

        Returns:
            200: The stored location sample
            400: Out-of-range coordinate, accuracy or battery level
            404: Device not registered
        """
        serializer = UpdateLocationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        logger.debug("updateLocation from %s: %s", get_client_ip(request), data['device_id'])
        sample = services.update_location(
            data['device_id'],
            data['latitude'],
            data['longitude'],
            accuracy=data.get('accuracy'),
            altitude=data.get('altitude'),
            battery_level=data.get('battery_level'),
        )
        return Response(LocationSampleSerializer(sample).data, status=status.HTTP_200_OK)

    def get_phone_location(self, request: Request) -> Response:
        """
        Return a device with its latest location.

        Query parameters:
        - device_id: External identifier of the device

        Returns:
            200: The device record with ``last_location`` (null if none)
            404: Device not registered
        """
        serializer = DeviceLookupSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        result = services.get_latest_location(serializer.validated_data['device_id'])
        return Response(DeviceLocationSerializer(result).data)

    def get_location_history(self, request: Request) -> Response:
        """
        Return every location of a device, newest first.

        Query parameters:
        - device_id: External identifier of the device

        Returns:
            200: List of location samples; empty for unknown devices
        """
        serializer = DeviceLookupSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        samples = services.get_location_history(serializer.validated_data['device_id'])
        return Response(LocationSampleSerializer(samples, many=True).data)
