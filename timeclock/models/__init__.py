from timeclock.models.user import User
from timeclock.models.shift import Shift
from timeclock.models.time_entry import TimeEntry
from timeclock.models.requests import TimeOffRequest, ShiftChangeRequest
from timeclock.models.notification import Notification

__all__ = [
    "User",
    "Shift",
    "TimeEntry",
    "TimeOffRequest",
    "ShiftChangeRequest",
    "Notification",
]
