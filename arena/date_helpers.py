"""
Date utilities for challenge windows and leaderboard periods.

All values are naive UTC datetimes, which is what MongoDB hands back for
stored dates.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional


def utcnow() -> datetime:
    """Current time as naive UTC, truncated to the store's millisecond precision"""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def start_of_week(now: Optional[datetime] = None) -> datetime:
    """Sunday 00:00:00 UTC of the current week"""
    now = now or utcnow()
    # weekday(): Monday=0 ... Sunday=6
    days_since_sunday = (now.weekday() + 1) % 7
    start = now - timedelta(days=days_since_sunday)
    return start.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_month(now: Optional[datetime] = None) -> datetime:
    """1st day of the current month at 00:00:00 UTC"""
    now = now or utcnow()
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def is_between(moment: datetime, start: datetime, end: datetime) -> bool:
    """Inclusive on both ends"""
    return start <= moment <= end


def format_date(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d")


def format_datetime(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M")


def time_remaining(target: datetime, now: Optional[datetime] = None) -> Dict[str, int]:
    """
    Days/hours/minutes from now until target.
    Returns zeros when target is already in the past.
    """
    now = now or utcnow()
    if target <= now:
        return {"days": 0, "hours": 0, "minutes": 0}

    diff = target - now
    hours, remainder = divmod(diff.seconds, 3600)
    return {
        "days": diff.days,
        "hours": hours,
        "minutes": remainder // 60,
    }


def future_date(days: int, now: Optional[datetime] = None) -> datetime:
    return (now or utcnow()) + timedelta(days=days)


def current_week_id(now: Optional[datetime] = None) -> str:
    """YYYY-WW, weeks starting on Sunday with week 1 containing Jan 1st"""
    now = now or utcnow()
    start_of_year = datetime(now.year, 1, 1)
    days = (now - start_of_year).days
    # isoweekday(): Monday=1 ... Sunday=7, so % 7 gives Sunday=0
    first_day_offset = start_of_year.isoweekday() % 7
    week_number = (days + first_day_offset) // 7 + 1
    return f"{now.year}-{week_number:02d}"


def current_month_id(now: Optional[datetime] = None) -> str:
    """YYYY-MM"""
    now = now or utcnow()
    return f"{now.year}-{now.month:02d}"
