"""URL routing for phone_tracker app."""

from django.urls import re_path
from django.urls.resolvers import URLPattern, URLResolver

from .views import TrackerViewSet

healthcheck = TrackerViewSet.as_view({'get': 'healthcheck'})
register_phone = TrackerViewSet.as_view({'post': 'register_phone'})
update_location = TrackerViewSet.as_view({'post': 'update_location'})
get_phone_location = TrackerViewSet.as_view({'get': 'get_phone_location'})
get_location_history = TrackerViewSet.as_view({'get': 'get_location_history'})

# Procedure names are part of the client contract; the trailing slash is optional
urlpatterns: list[URLPattern | URLResolver] = [
    re_path(r'^healthcheck/?$', healthcheck, name='healthcheck'),
    re_path(r'^registerPhone/?$', register_phone, name='register-phone'),
    re_path(r'^updateLocation/?$', update_location, name='update-location'),
    re_path(r'^getPhoneLocation/?$', get_phone_location, name='get-phone-location'),
    re_path(r'^getLocationHistory/?$', get_location_history, name='get-location-history'),
]
