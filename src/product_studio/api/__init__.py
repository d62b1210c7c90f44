"""HTTP API for product studio."""
