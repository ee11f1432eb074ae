"""Calendar-aligned counting windows.

Window keys and reset times come from the wall-clock fields of the datetime
passed in, so the same instant falls into different windows in different
zones. Callers pass a timezone-aware local time.
"""

from __future__ import annotations

from datetime import datetime, timedelta


def hourly_window_id(user_id: str, operation: str, moment: datetime) -> str:
    return f"{user_id}_{operation}_{moment:%Y-%m-%d-%H}"


def daily_window_id(user_id: str, operation: str, moment: datetime) -> str:
    return f"{user_id}_{operation}_{moment:%Y-%m-%d}"


def next_hour(moment: datetime) -> datetime:
    return moment.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)


def next_midnight(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)


def minutes_until(target: datetime, moment: datetime) -> int:
    """Whole minutes from ``moment`` to ``target``, rounded up."""
    return -int(-(target - moment).total_seconds() // 60)


def hours_until(target: datetime, moment: datetime) -> int:
    return -int(-(target - moment).total_seconds() // 3600)


def plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"
