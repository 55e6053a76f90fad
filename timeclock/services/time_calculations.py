"""
Time arithmetic shared by the clock, scheduling and reporting services.

All datetimes handled here are naive. Stored values are naive UTC; the
business time zone only matters when turning "today" or "this week" into a
UTC range, which is what ``local_now`` and ``to_utc_range`` are for.
"""
from datetime import datetime, date, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple
import pytz

PAY_PERIOD_ANCHOR = datetime(2024, 1, 1)
PAY_PERIOD_DAYS = 14

EARLY_CLOCK_IN_GRACE = timedelta(minutes=15)
LATE_CLOCK_OUT_GRACE = timedelta(minutes=60)

_END_OF_DAY = timedelta(days=1) - timedelta(milliseconds=1)


def utcnow() -> datetime:
    """Current time as naive UTC, the representation every column uses."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize an incoming datetime; naive input is assumed to already be UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def local_now(tz_name: str, now: Optional[datetime] = None) -> datetime:
    """Naive wall-clock time in ``tz_name`` for the given naive UTC instant."""
    now = now or utcnow()
    return pytz.utc.localize(now).astimezone(pytz.timezone(tz_name)).replace(tzinfo=None)


def to_utc_range(start: datetime, end: datetime, tz_name: str) -> Tuple[datetime, datetime]:
    """Interpret a naive local range in ``tz_name`` and return it as naive UTC."""
    tz = pytz.timezone(tz_name)
    start_utc = tz.localize(start).astimezone(pytz.utc).replace(tzinfo=None)
    end_utc = tz.localize(end).astimezone(pytz.utc).replace(tzinfo=None)
    return start_utc, end_utc


def hours_between(clock_in: datetime, clock_out: datetime) -> float:
    """
    Elapsed hours rounded half-up to 2 decimal places.

    Ordering is not checked; a clock-out before the clock-in yields a negative value.
    """
    elapsed_ms = (clock_out - clock_in) // timedelta(milliseconds=1)
    hours = Decimal(elapsed_ms) / Decimal(3_600_000)
    return float(hours.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def day_range(reference: datetime) -> Tuple[datetime, datetime]:
    start = datetime.combine(reference.date(), datetime.min.time())
    return start, start + _END_OF_DAY


def week_range(reference: datetime) -> Tuple[datetime, datetime]:
    """Sunday 00:00:00.000 through Saturday 23:59:59.999 of the week holding ``reference``."""
    midnight = datetime.combine(reference.date(), datetime.min.time())
    # weekday(): Monday is 0, Sunday is 6
    start = midnight - timedelta(days=(midnight.weekday() + 1) % 7)
    return start, start + timedelta(days=6) + _END_OF_DAY


def pay_period_range(reference: datetime) -> Tuple[datetime, datetime]:
    """
    Fixed 14-day period holding ``reference``.

    Periods are numbered from PAY_PERIOD_ANCHOR (period 0); references before
    the anchor fall into negative periods.
    """
    days_since_anchor = (reference - PAY_PERIOD_ANCHOR) // timedelta(days=1)
    period_index = days_since_anchor // PAY_PERIOD_DAYS
    start = PAY_PERIOD_ANCHOR + timedelta(days=period_index * PAY_PERIOD_DAYS)
    return start, start + timedelta(days=PAY_PERIOD_DAYS - 1) + _END_OF_DAY


def is_within_shift_window(now: datetime, shift_start: datetime, shift_end: datetime) -> bool:
    """True when ``now`` lies in [start - 15min, end + 60min]."""
    return shift_start - EARLY_CLOCK_IN_GRACE <= now <= shift_end + LATE_CLOCK_OUT_GRACE


def ranges_overlap(start1: datetime, end1: datetime, start2: datetime, end2: datetime) -> bool:
    """Half-open interval overlap; touching endpoints do not overlap."""
    return start1 < end2 and start2 < end1


def date_ranges_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    """Inclusive date range overlap, covering containment in either direction."""
    return start1 <= end2 and start2 <= end1
