"""Domain models shared across the service and API layers."""
