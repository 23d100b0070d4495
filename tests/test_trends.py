"""
Unit Tests for the Trend Builder
"""
from datetime import date

from attendance_insights.trends import (
    AttendanceTrend,
    build_trend,
    class_trend,
    student_trend,
    window_start,
)


class TestWindow:
    """Tests for the trailing day window"""

    def test_window_start(self, today):
        assert window_start(30, today) == date(2025, 12, 21)

    def test_zero_days_is_today(self, today):
        assert window_start(0, today) == today


class TestBuildTrend:
    """Tests for daily trend construction"""

    def test_sorted_ascending_by_date(self, make_raw, normalize):
        records = normalize([
            make_raw(days_ago=0),
            make_raw(days_ago=5, status='absent'),
            make_raw(days_ago=2),
        ])

        trend = build_trend(records)

        assert [t.date for t in trend] == ['2026-01-15', '2026-01-18', '2026-01-20']
        assert [t.percentage for t in trend] == [0, 100, 100]

    def test_empty_records(self):
        assert build_trend([]) == []

    def test_to_dict(self):
        assert AttendanceTrend('2026-01-20', 75).to_dict() == {'date': '2026-01-20', 'percentage': 75}


class TestStudentTrend:
    """Tests for the per-student trend"""

    def test_scoped_to_student_and_window(self, make_raw, normalize, today):
        records = normalize([
            make_raw(student_id='S1', days_ago=1),
            make_raw(student_id='S1', days_ago=10, status='absent'),
            make_raw(student_id='S1', days_ago=11),
            make_raw(student_id='S2', days_ago=1, status='absent'),
        ])

        trend = student_trend(records, 'S1', days=10, today=today)

        assert [t.date for t in trend] == ['2026-01-10', '2026-01-19']
        assert [t.percentage for t in trend] == [0, 100]
        cutoff = window_start(10, today).isoformat()
        assert all(t.date >= cutoff for t in trend)

    def test_no_records_in_window(self, make_raw, normalize, today):
        records = normalize([make_raw(student_id='S1', days_ago=90)])
        assert student_trend(records, 'S1', days=30, today=today) == []

    def test_non_decreasing_dates(self, make_raw, normalize, today):
        records = normalize([make_raw(days_ago=d) for d in (3, 1, 7, 2, 9, 0)])
        dates = [t.date for t in student_trend(records, 'STU001', days=30, today=today)]
        assert dates == sorted(dates)


class TestClassTrend:
    """Tests for the per-class trend"""

    def test_scoped_to_class_and_section(self, make_raw, normalize, today):
        records = normalize([
            make_raw(student_id='S1', class_id='10', section='A', status='present'),
            make_raw(student_id='S2', class_id='10', section='A', status='absent'),
            make_raw(student_id='S3', class_id='10', section='B', status='absent'),
            make_raw(student_id='S4', class_id='9', section='A', status='absent'),
        ])

        trend = class_trend(records, '10', 'A', days=30, today=today)

        assert trend == [AttendanceTrend('2026-01-20', 50)]
