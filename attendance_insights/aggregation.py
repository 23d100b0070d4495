"""
Attendance Aggregation
Groups attendance records and computes present/total counts and
percentages per group, plus class and student level summaries.
"""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Tuple

from .records import AttendanceRecord

# Configure logging
logger = logging.getLogger(__name__)

KeyFunc = Callable[[AttendanceRecord], Hashable]


@dataclass
class GroupCounts:
    """Present and total counts for one group of records."""
    present: int = 0
    total: int = 0

    def add(self, record: AttendanceRecord):
        self.total += 1
        if record.counts_as_present:
            self.present += 1

    @property
    def percentage(self) -> Optional[int]:
        return percentage_of(self.present, self.total)


@dataclass
class ClassAttendanceSummary:
    """Aggregate for one class+section over the full record set."""
    class_id: str
    section: str
    present: int
    total: int
    percentage: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'class': self.class_id,
            'section': self.section,
            'present': self.present,
            'total': self.total,
            'percentage': self.percentage,
        }


@dataclass
class AttendanceSummary:
    """Aggregate for one student over the full record set."""
    student_id: str
    student_name: str
    present: int
    total: int
    percentage: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'studentId': self.student_id,
            'studentName': self.student_name,
            'present': self.present,
            'total': self.total,
            'percentage': self.percentage,
        }


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


def percentage_of(present: int, total: int) -> Optional[int]:
    """
    Rounded attendance percentage.

    Returns:
        Integer percentage 0-100, or None when total is zero
    """
    if total <= 0:
        return None
    return round_half_up(present / total * 100)


# Grouping keys

def by_date(record: AttendanceRecord) -> str:
    return record.date_key


def by_class_section(record: AttendanceRecord) -> Tuple[str, str]:
    return (record.class_id, record.section)


def by_class_section_date(record: AttendanceRecord) -> Tuple[str, str, str]:
    return (record.class_id, record.section, record.date_key)


def by_student(record: AttendanceRecord) -> str:
    return record.student_id


def aggregate(
    records: Iterable[AttendanceRecord], key_func: KeyFunc = by_date
) -> Dict[Hashable, GroupCounts]:
    """
    Group records and count present/total per group.

    Present and late both count as present; absent and excused do not.

    Args:
        records: Normalized attendance records
        key_func: Function mapping a record to its group key

    Returns:
        Mapping of group key to counts
    """
    groups: Dict[Hashable, GroupCounts] = defaultdict(GroupCounts)
    for record in records:
        groups[key_func(record)].add(record)
    return dict(groups)


def group_percentages(
    records: Iterable[AttendanceRecord], key_func: KeyFunc = by_date
) -> Dict[Hashable, int]:
    """Percentage per non-empty group."""
    percentages = {}
    for key, counts in aggregate(records, key_func).items():
        percentage = counts.percentage
        if percentage is not None:
            percentages[key] = percentage
    return percentages


def summarize_classes(records: Iterable[AttendanceRecord]) -> List[ClassAttendanceSummary]:
    """
    Overall attendance per class+section, with no time window.

    Args:
        records: Full record set

    Returns:
        One summary per distinct (class, section) pair
    """
    summaries = []
    for (class_id, section), counts in aggregate(records, by_class_section).items():
        if counts.total == 0:
            continue
        summaries.append(ClassAttendanceSummary(
            class_id=class_id,
            section=section,
            present=counts.present,
            total=counts.total,
            percentage=counts.percentage,
        ))
    return summaries


def summarize_students(records: Iterable[AttendanceRecord]) -> List[AttendanceSummary]:
    """
    Overall attendance per student.

    Args:
        records: Attendance records

    Returns:
        One summary per distinct student id, ordered by student id
    """
    records = list(records)
    names: Dict[str, str] = {}
    for record in records:
        if record.student_name and record.student_id not in names:
            names[record.student_id] = record.student_name

    summaries = []
    for student_id, counts in sorted(aggregate(records, by_student).items()):
        summaries.append(AttendanceSummary(
            student_id=student_id,
            student_name=names.get(student_id, ''),
            present=counts.present,
            total=counts.total,
            percentage=counts.percentage,
        ))
    return summaries


def status_distribution(records: Iterable[AttendanceRecord]) -> Dict[str, int]:
    """
    Get distribution of attendance statuses.

    Returns:
        Dictionary with status counts
    """
    distribution = defaultdict(int)
    for record in records:
        distribution[record.status.value] += 1
    return dict(distribution)


@dataclass(frozen=True)
class FrequentAbsentee:
    """Student whose overall attendance is below a threshold."""
    student_id: str
    student_name: str
    percentage: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'studentId': self.student_id,
            'studentName': self.student_name,
            'percentage': self.percentage,
        }


def find_frequent_absentees(
    records: Iterable[AttendanceRecord], threshold: float = 80
) -> List[FrequentAbsentee]:
    """
    Students whose overall percentage is strictly below ``threshold``.

    Args:
        records: Attendance records
        threshold: Percentage threshold

    Returns:
        Absentees sorted by percentage, then student id
    """
    absentees = [
        FrequentAbsentee(s.student_id, s.student_name, s.percentage)
        for s in summarize_students(records)
        if s.percentage < threshold
    ]
    absentees.sort(key=lambda a: (a.percentage, a.student_id))
    return absentees
