"""
Attendance Trend Builder
Turns records into chronologically ordered daily percentage series,
scoped to a student or to a class+section and bounded by a day window.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from .aggregation import by_date, group_percentages
from .records import AttendanceRecord

# Configure logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttendanceTrend:
    """One point in an attendance time series."""
    date: str
    percentage: int

    def to_dict(self) -> Dict[str, Any]:
        return {'date': self.date, 'percentage': self.percentage}


def window_start(days: int, today: Optional[date] = None) -> date:
    """First calendar date inside a trailing window of ``days`` days."""
    today = today or date.today()
    return today - timedelta(days=days)


def build_trend(records: Iterable[AttendanceRecord]) -> List[AttendanceTrend]:
    """
    Build a daily trend from records.

    Args:
        records: Records already scoped to a student or class

    Returns:
        Trend points sorted ascending by date string
    """
    percentages = group_percentages(records, by_date)
    return [
        AttendanceTrend(date=day, percentage=percentages[day])
        for day in sorted(percentages)
    ]


def filter_window(
    records: Iterable[AttendanceRecord], days: int, today: Optional[date] = None
) -> List[AttendanceRecord]:
    """Keep records dated on or after the start of the window."""
    cutoff = window_start(days, today)
    return [r for r in records if r.date >= cutoff]


def student_trend(
    records: Iterable[AttendanceRecord],
    student_id: str,
    days: int = 30,
    today: Optional[date] = None,
) -> List[AttendanceTrend]:
    """
    Daily trend for one student over the trailing window.

    Args:
        records: Attendance records
        student_id: Student to scope to
        days: Window length in days
        today: End of the window (defaults to today)

    Returns:
        Ordered trend points
    """
    scoped = [r for r in records if r.student_id == student_id]
    return build_trend(filter_window(scoped, days, today))


def class_trend(
    records: Iterable[AttendanceRecord],
    class_id: str,
    section: str,
    days: int = 30,
    today: Optional[date] = None,
) -> List[AttendanceTrend]:
    """
    Daily trend for one class+section over the trailing window.

    Args:
        records: Attendance records
        class_id: Class to scope to
        section: Section within the class
        days: Window length in days
        today: End of the window (defaults to today)

    Returns:
        Ordered trend points
    """
    scoped = [r for r in records if r.class_id == class_id and r.section == section]
    return build_trend(filter_window(scoped, days, today))
