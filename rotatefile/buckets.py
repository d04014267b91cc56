"""Calendar-aligned rotation boundaries and timestamp layouts for rotated files."""

from datetime import date, datetime, timedelta, tzinfo

MINUTE = timedelta(minutes=1)
HOUR = timedelta(hours=1)
DAY = timedelta(days=1)
WEEK = timedelta(days=7)
MONTH = timedelta(days=30)


def _midnight(day: date, tz: tzinfo) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=tz)


def next_boundary(reference: datetime, period: timedelta, tz: tzinfo) -> datetime:
    """Return the first rotation boundary after *reference* for *period*.

    Boundaries sit on a calendar grid in *tz* (month start, Monday, midnight,
    top of hour, or a multiple of the period in minutes) rather than at
    ``reference + period``. Periods under a minute are treated as one day.
    """
    now = reference.astimezone(tz)
    if period < MINUTE:
        period = DAY

    if period % MONTH == timedelta(0):
        years, month0 = divmod(now.month - 1 + period // MONTH, 12)
        return datetime(now.year + years, month0 + 1, 1, tzinfo=tz)

    # Day-based tiers step on dates, so a DST shift cannot land us on the wrong day.
    if period % WEEK == timedelta(0):
        today = now.date()
        days = (period // WEEK) * 7 - today.weekday()
        return _midnight(today + timedelta(days=days), tz)

    if period % DAY == timedelta(0):
        return _midnight(now.date() + timedelta(days=period // DAY), tz)

    if period % HOUR == timedelta(0):
        step = period // HOUR
        hour = ((now.hour + step) // step) * step
        days, hour = divmod(hour, 24)
        day = now.date() + timedelta(days=days)
        return datetime(day.year, day.month, day.day, hour, tzinfo=tz)

    step = period // MINUTE
    nxt = now + timedelta(minutes=step)
    return nxt.replace(minute=step * (nxt.minute // step), second=0, microsecond=0)


def layout_for(period: timedelta) -> str:
    """strftime layout for rotated file names, coarser for longer periods."""
    if period >= MONTH:
        return "%Y%m"
    if period >= DAY:
        return "%Y%m%d"
    if period >= HOUR:
        return "%Y%m%dT%H"
    return "%Y%m%dT%H%M"
