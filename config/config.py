"""Session-engine policy shared by every environment."""

import os

# Civil timezone for "today", weekday and class-window checks.
ATTENDANCE_TIMEZONE = os.environ.get("ATTENDANCE_TIMEZONE", "Asia/Kolkata")

# Length of the attendance window opened by a teacher.
SESSION_DURATION_MINUTES = int(os.environ.get("SESSION_DURATION_MINUTES", "5"))

# Geofence radius around the teacher's position.
DEFAULT_RADIUS_METERS = float(os.environ.get("DEFAULT_RADIUS_METERS", "30"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
