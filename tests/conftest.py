"""
Attendance Insights - Test Configuration and Fixtures
"""
from datetime import date, timedelta
from itertools import count

import pytest

from attendance_insights.config import AnalyticsConfig
from attendance_insights.records import RecordNormalizer
from attendance_insights.service import AttendanceAnalyticsService
from attendance_insights.store import InMemoryAttendanceStore
from attendance_insights.trends import AttendanceTrend

TODAY = date(2026, 1, 20)


@pytest.fixture
def today():
    """Fixed reference date for window calculations"""
    return TODAY


@pytest.fixture
def make_raw():
    """Factory for raw store records, dated relative to TODAY"""
    ids = count(1)

    def _make(
        student_id='STU001',
        status='present',
        days_ago=0,
        class_id='10',
        section='A',
        student_name=None,
        **extra,
    ):
        raw = {
            'id': f'rec-{next(ids)}',
            'studentId': student_id,
            'studentName': student_name or f'Student {student_id}',
            'class': class_id,
            'section': section,
            'date': (TODAY - timedelta(days=days_ago)).isoformat(),
            'status': status,
        }
        raw.update(extra)
        return raw

    return _make


@pytest.fixture
def normalize():
    """Normalize raw records into AttendanceRecord objects"""
    normalizer = RecordNormalizer()

    def _normalize(raws):
        return [normalizer.normalize(raw) for raw in raws]

    return _normalize


@pytest.fixture
def make_trend():
    """Build a chronological trend from a list of percentages"""
    def _make(percentages):
        start = TODAY - timedelta(days=len(percentages))
        return [
            AttendanceTrend(date=(start + timedelta(days=i)).isoformat(), percentage=p)
            for i, p in enumerate(percentages)
        ]

    return _make


@pytest.fixture
def service_for():
    """Create a service over an in-memory store with the fixed date"""
    def _service(raws, config=None):
        store = InMemoryAttendanceStore(raws)
        return AttendanceAnalyticsService(store, config=config or AnalyticsConfig(), today=lambda: TODAY)

    return _service
