"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

UNKNOWN_DATE_LABEL = "Unknown Date"
UNKNOWN_TIME_LABEL = "Unknown Time"

DEFAULT_RECENT_SESSIONS = 5
AVAILABLE_PERIODS = (1, 2, 3, 4, 5, 6, 7)
MIN_PASSWORD_LENGTH = 6

# In-band tag carrying the session-wide note inside one record's remark.
SESSION_NOTE_TAG = "NOTE"

DEFAULT_DEPARTMENTS = ("CSE", "ECE", "EEE", "MECH", "CIVIL")
