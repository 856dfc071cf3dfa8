"""Utility modules for reviewthor."""

from reviewthor.utils.glob import glob_to_regex, matches_any, matches_pattern
from reviewthor.utils.logging import (
    CorrelationAdapter,
    JsonFormatter,
    configure_logging,
    get_logger,
    with_correlation_id,
)

__all__ = [
    "CorrelationAdapter",
    "JsonFormatter",
    "configure_logging",
    "get_logger",
    "glob_to_regex",
    "matches_any",
    "matches_pattern",
    "with_correlation_id",
]
