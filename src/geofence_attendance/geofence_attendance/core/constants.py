"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "Asia/Kolkata"
DEFAULT_SESSION_DURATION_MINUTES = 5
DEFAULT_RADIUS_METERS = 30.0

EARTH_RADIUS_METERS = 6_371_000.0

# MySQL "Duplicate entry ... for key" error number.
MYSQL_DUPLICATE_KEY = 1062
