"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# ISO weekday numbers (1=Monday ... 7=Sunday).
SHORT_DAY = 5
REST_DAY = 7

PERIODS_PER_DAY = 5
MARKING_WINDOW_MINUTES = 15

MDC_MIN_YEAR = 1
MDC_MAX_YEAR = 4
MDC_MIN_SEMESTER = 1
MDC_MAX_SEMESTER = 8

STUDENT_ATTENDANCE_LINK = "/dashboard/student/attendance"
STUDENT_PROFILE_LINK = "/dashboard/student/profile"

# Longest span the student calendar may request, counting both end dates.
MAX_ATTENDANCE_RANGE_DAYS = 90
