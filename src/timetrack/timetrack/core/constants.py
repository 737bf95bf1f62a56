"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000
WORK_DESCRIPTION_MAX_LENGTH = 500

MIN_ESTIMATED_HOURS = Decimal("0.1")
MAX_ESTIMATED_HOURS = Decimal("999.99")
MIN_HOURS_PER_ENTRY = Decimal("0")
MAX_HOURS_PER_ENTRY = Decimal("24")
HOURS_DECIMAL_PLACES = 2

DEFAULT_DISPLAY_PREFIX = "TASK"
UNKNOWN_USER_NAME = "Unknown"
