"""Device registration and location history tracking."""
