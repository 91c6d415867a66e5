"""App configuration for phone_tracker application."""
from django.apps import AppConfig


class PhoneTrackerConfig(AppConfig):
    """Configuration for the phone_tracker app."""

    default_auto_field: str = 'django.db.models.BigAutoField'
    name: str = 'phone_tracker'
    verbose_name: str = 'Phone Tracker'
