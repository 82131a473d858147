"""Device-side timezone state and change notification."""
