"""
Constants for the Teamsheet selection engine.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "Teamsheet"

# Web server defaults
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 7122

# Period duration bounds (minutes)
MIN_PERIOD_DURATION_MIN = 1
MAX_PERIOD_DURATION_MIN = 90
DEFAULT_PERIOD_DURATION_MIN = 20

# Halves a fixture is split into
FIRST_HALF = 1
SECOND_HALF = 2
HALF_INDEXES = (FIRST_HALF, SECOND_HALF)

# Reserved period ids, seeded for every team and never deletable
FIRST_HALF_PERIOD_ID = "first-half"
SECOND_HALF_PERIOD_ID = "second-half"
RESERVED_PERIOD_IDS = {
    FIRST_HALF_PERIOD_ID: FIRST_HALF,
    SECOND_HALF_PERIOD_ID: SECOND_HALF,
}
PERIOD_LABELS = {
    FIRST_HALF_PERIOD_ID: "First Half",
    SECOND_HALF_PERIOD_ID: "Second Half",
}

# Player id stored in an empty slot
UNASSIGNED_PLAYER_ID = "unassigned"

# Prefix of substitute slot keys ("sub-1", "sub-2", ...)
SUBSTITUTE_SLOT_PREFIX = "sub-"

# Performance categories a period can be tagged with
PERFORMANCE_CATEGORIES = ("MESSI", "RONALDO", "JAGS")
DEFAULT_PERFORMANCE_CATEGORY = "MESSI"

# Fixture formats
DEFAULT_FORMAT = "7-a-side"
