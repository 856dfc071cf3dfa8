"""Repository review instructions."""
