"""Domain Layer: resource shapes, gateway interface and API events."""
