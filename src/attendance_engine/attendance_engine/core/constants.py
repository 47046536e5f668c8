"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Every value can be overridden through the ENGINE settings dict.
"""

DEFAULT_GHOST_PAIR_WINDOW_MINUTES = 10
DEFAULT_PERSIST_GROUP_SIZE = 50
DEFAULT_DIAGNOSTIC_LIMIT = 12
DEFAULT_FUTURE_TOLERANCE_MINUTES = 5

DEFAULT_STANDARD_DAILY_HOURS = 8.0
DEFAULT_LUNCH_BREAK_MINUTES = 60
DEFAULT_LUNCH_MIN_SPAN_HOURS = 4.0
DEFAULT_DINNER_BREAK_MINUTES = 60
DEFAULT_EVENING_THRESHOLD = "18:30"

DEFAULT_NIGHT_START_HOUR = 22
DEFAULT_NIGHT_END_HOUR = 6

DEFAULT_LONG_SPAN_WARNING_HOURS = 16.0
DEFAULT_MAX_OVERNIGHT_SPAN_HOURS = 24.0

DEFAULT_PAID_REST_WEEKLY_HOURS = 40.0
DEFAULT_PAID_REST_DAY_HOURS = 8.0

DEFAULT_FULL_DAY_LEAVE_HOURS = 8.0
DEFAULT_HALF_DAY_LEAVE_HOURS = 4.0

DEFAULT_VERIFY_SAMPLE_SIZE = 10
DEFAULT_VERIFY_TOLERANCE_HOURS = 1.0

# Access-control categories that carry no attendance meaning.
DEFAULT_IGNORED_PUNCH_CATEGORIES = ("출입", "일반", "ACCESS", "GENERAL")
