"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MIN_MONTH = 1
MAX_MONTH = 12
MIN_YEAR = 1900
MAX_YEAR = 2100

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M:%S"
SHORT_TIME_FORMAT = "%H:%M"

DEFAULT_POOL_SIZE = 5
DEFAULT_CONNECT_ATTEMPTS = 10
