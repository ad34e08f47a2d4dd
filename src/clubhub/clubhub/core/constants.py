"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100

DEFAULT_QR_VALIDITY_HOURS = 24
DEFAULT_QR_SESSION_MINUTES = 120
QR_CODE_TYPE_ATTENDANCE = "attendance"

DEFAULT_JWT_EXPIRES_MINUTES = 60 * 24

NOT_REGISTERED_MESSAGE = "User is not registered for this event"
CHECKOUT_BEFORE_CHECKIN_MESSAGE = "User must check in before check out"
EVENT_FULL_MESSAGE = "Event is full"

ATTENDANCE_SORT_COLUMNS = {
    "registration_date": "er.registration_date",
    "name": "u.last_name",
    "check_in_time": "er.check_in_time",
    "status": "er.status",
}
