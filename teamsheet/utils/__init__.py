"""
Utilities package for the Teamsheet selection engine.

This package contains constants, runtime configuration and logging helpers.
"""
from .constants import (
    APP_TITLE, DEFAULT_PERIOD_DURATION_MIN, MIN_PERIOD_DURATION_MIN,
    MAX_PERIOD_DURATION_MIN, FIRST_HALF_PERIOD_ID, SECOND_HALF_PERIOD_ID,
    RESERVED_PERIOD_IDS, UNASSIGNED_PLAYER_ID, PERFORMANCE_CATEGORIES,
    DEFAULT_PERFORMANCE_CATEGORY
)
from .config import StorageSettings
from .log_utils import configure_logging

__all__ = [
    "APP_TITLE", "DEFAULT_PERIOD_DURATION_MIN", "MIN_PERIOD_DURATION_MIN",
    "MAX_PERIOD_DURATION_MIN", "FIRST_HALF_PERIOD_ID", "SECOND_HALF_PERIOD_ID",
    "RESERVED_PERIOD_IDS", "UNASSIGNED_PLAYER_ID", "PERFORMANCE_CATEGORIES",
    "DEFAULT_PERFORMANCE_CATEGORY", "StorageSettings", "configure_logging"
]
