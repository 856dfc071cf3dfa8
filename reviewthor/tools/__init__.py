"""GitHub host operations."""
