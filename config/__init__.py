"""Django project configuration for the phone tracker."""
