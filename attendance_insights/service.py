#!/usr/bin/env python3
"""
Attendance Analytics Service
Async entry points used by the dashboards: student and class trends,
risk prediction, class summaries and frequent absentees.

Every public coroutine is fail-soft: store and normalization errors are
logged and the caller receives an empty result or a default prediction.
"""

import asyncio
import logging
from datetime import date
from typing import Callable, List, Optional, Sequence, Tuple

from .aggregation import (
    AttendanceSummary,
    ClassAttendanceSummary,
    FrequentAbsentee,
    find_frequent_absentees,
    summarize_classes,
    summarize_students,
)
from .config import AnalyticsConfig
from .records import AttendanceRecord, NormalizationReport, RecordNormalizer
from .risk import (
    PREDICTION_ERROR_EXPLANATION,
    AttendancePrediction,
    RiskClassifier,
    default_prediction,
)
from .store import (
    AttendanceQuery,
    AttendanceStore,
    InMemoryAttendanceStore,
    JsonFileAttendanceStore,
)
from .trends import AttendanceTrend, class_trend, student_trend, window_start

# Configure logging
logger = logging.getLogger(__name__)


class AttendanceAnalyticsService:
    """
    Analytics over attendance records fetched from a record store.

    Holds no record state between calls; each call queries the store and
    recomputes its result.
    """

    def __init__(
        self,
        store: AttendanceStore,
        config: AnalyticsConfig = None,
        classifier: RiskClassifier = None,
        today: Callable[[], date] = None,
    ):
        """
        Initialize the service.

        Args:
            store: Record store to query
            config: Analytics configuration (defaults if omitted)
            classifier: Risk classifier (defaults if omitted)
            today: Callable returning the current date, for the trend windows
        """
        self.store = store
        self.config = config or AnalyticsConfig()
        self.classifier = classifier or RiskClassifier()
        self.normalizer = RecordNormalizer()
        self._today = today or date.today

    @classmethod
    def from_config(cls, config: AnalyticsConfig = None) -> 'AttendanceAnalyticsService':
        """
        Create a service reading the JSON store named by DATA_FILE.

        Args:
            config: Analytics configuration (read from the environment if omitted)

        Returns:
            AttendanceAnalyticsService over a JsonFileAttendanceStore
        """
        config = config or AnalyticsConfig.from_env()
        logger.info(f"Using attendance data file {config.data_file}")
        return cls(JsonFileAttendanceStore(config.data_file), config=config)

    async def _fetch(self, query: AttendanceQuery) -> Tuple[List[AttendanceRecord], NormalizationReport]:
        raws = await self.store.query_attendance(query)
        records, report = self.normalizer.normalize_all(raws)
        logger.debug(f"Fetched {report.total} records for {query}, {report.skipped} skipped")
        return records, report

    async def get_student_attendance_trends(
        self, student_id: str, days: int = None
    ) -> List[AttendanceTrend]:
        """
        Daily attendance trend for a student.

        Args:
            student_id: Student to analyze
            days: Trailing window in days (config default if omitted)

        Returns:
            Trend points sorted by date, empty on any failure
        """
        days = self.config.trend_days if days is None else days
        try:
            today = self._today()
            query = AttendanceQuery(student_id=student_id, date_from=window_start(days, today))
            records, _ = await self._fetch(query)
            return student_trend(records, student_id, days, today)
        except Exception as e:
            logger.error(f"Error fetching student attendance trends for {student_id}: {e}")
            return []

    async def get_class_attendance_trends(
        self, class_id: str, section: str, days: int = None
    ) -> List[AttendanceTrend]:
        """
        Daily attendance trend for a class section.

        Args:
            class_id: Class to analyze
            section: Section within the class
            days: Trailing window in days (config default if omitted)

        Returns:
            Trend points sorted by date, empty on any failure
        """
        days = self.config.trend_days if days is None else days
        try:
            today = self._today()
            query = AttendanceQuery(
                class_id=class_id, section=section, date_from=window_start(days, today)
            )
            records, _ = await self._fetch(query)
            return class_trend(records, class_id, section, days, today)
        except Exception as e:
            logger.error(f"Error fetching class attendance trends for {class_id}-{section}: {e}")
            return []

    async def predict_attendance_risk(self, student_id: str) -> AttendancePrediction:
        """
        Predict a student's attendance risk from their recent trend.

        Args:
            student_id: Student to assess

        Returns:
            AttendancePrediction; the insufficient-data default when the
            trend cannot be fetched
        """
        trends = await self.get_student_attendance_trends(
            student_id, self.config.risk_history_days
        )
        try:
            return self.classifier.classify(student_id, trends)
        except Exception as e:
            logger.error(f"Error predicting attendance risk for {student_id}: {e}")
            return default_prediction(student_id, PREDICTION_ERROR_EXPLANATION)

    async def predict_attendance_risk_for_students(
        self, student_ids: Sequence[str]
    ) -> List[AttendancePrediction]:
        """Predict risk for several students concurrently, in input order."""
        return list(await asyncio.gather(
            *(self.predict_attendance_risk(student_id) for student_id in student_ids)
        ))

    async def get_class_attendance_summaries(self) -> List[ClassAttendanceSummary]:
        """
        Overall attendance per class and section across all records.

        Returns:
            One summary per class+section, empty on any failure
        """
        try:
            records, _ = await self._fetch(AttendanceQuery())
            return summarize_classes(records)
        except Exception as e:
            logger.error(f"Error fetching class attendance summaries: {e}")
            return []

    async def get_student_attendance_summary(self, student_id: str) -> Optional[AttendanceSummary]:
        """
        Overall attendance for one student.

        Returns:
            AttendanceSummary, or None if the student has no records or
            the store fails
        """
        try:
            records, _ = await self._fetch(AttendanceQuery(student_id=student_id))
            records = [r for r in records if r.student_id == student_id]
            summaries = summarize_students(records)
            return summaries[0] if summaries else None
        except Exception as e:
            logger.error(f"Error fetching attendance summary for {student_id}: {e}")
            return None

    async def get_frequent_absentees(self, threshold: float = None) -> List[FrequentAbsentee]:
        """
        Students whose overall attendance is below a threshold.

        Args:
            threshold: Percentage threshold (config default if omitted)

        Returns:
            Absentees sorted by percentage then student id, empty on any failure
        """
        threshold = self.config.absentee_threshold if threshold is None else threshold
        try:
            records, _ = await self._fetch(AttendanceQuery())
            return find_frequent_absentees(records, threshold)
        except Exception as e:
            logger.error(f"Error fetching frequent absentees: {e}")
            return []

    async def get_normalization_report(self) -> Optional[NormalizationReport]:
        """
        Check how many stored records cannot be used by the analytics.

        Returns:
            NormalizationReport over the full record set, with one error
            line per skipped record; None if the store fails
        """
        try:
            _, report = await self._fetch(AttendanceQuery())
            return report
        except Exception as e:
            logger.error(f"Error checking attendance records: {e}")
            return None


# Convenience functions for quick access

async def get_student_attendance_trends(
    store: AttendanceStore, student_id: str, days: int = 30
) -> List[AttendanceTrend]:
    """
    Quick function to get a student's attendance trend.

    Args:
        store: Record store
        student_id: Student to analyze
        days: Trailing window in days

    Returns:
        Ordered trend points
    """
    return await AttendanceAnalyticsService(store).get_student_attendance_trends(student_id, days)


async def get_class_attendance_trends(
    store: AttendanceStore, class_id: str, section: str, days: int = 30
) -> List[AttendanceTrend]:
    """Quick function to get a class section's attendance trend."""
    return await AttendanceAnalyticsService(store).get_class_attendance_trends(class_id, section, days)


async def predict_attendance_risk(store: AttendanceStore, student_id: str) -> AttendancePrediction:
    """Quick function to predict a student's attendance risk."""
    return await AttendanceAnalyticsService(store).predict_attendance_risk(student_id)


async def get_class_attendance_summaries(store: AttendanceStore) -> List[ClassAttendanceSummary]:
    """Quick function to summarize attendance per class and section."""
    return await AttendanceAnalyticsService(store).get_class_attendance_summaries()


async def get_frequent_absentees(store: AttendanceStore, threshold: float = 80) -> List[FrequentAbsentee]:
    """Quick function to list students below an attendance threshold."""
    return await AttendanceAnalyticsService(store).get_frequent_absentees(threshold)


async def _demo():
    from datetime import timedelta

    today = date.today()
    statuses = ['present', 'present', 'late', 'absent', 'present', 'present', 'excused', 'present']
    records = []
    for offset in range(20):
        day = (today - timedelta(days=offset)).isoformat()
        records.append({
            'id': f'A{offset:03d}', 'studentId': 'STU001', 'studentName': 'John Doe',
            'class': '10', 'section': 'A', 'date': day,
            'status': statuses[offset % len(statuses)],
        })
        records.append({
            'id': f'B{offset:03d}', 'studentId': 'STU002', 'studentName': 'Jane Smith',
            'class': '10', 'section': 'B', 'date': day,
            'status': 'absent' if offset % 3 else 'present',
        })

    service = AttendanceAnalyticsService(InMemoryAttendanceStore(records))

    print("=== Attendance Analytics Demo ===\n")

    trends = await service.get_student_attendance_trends('STU001', 14)
    print(f"STU001 trend points (14 days): {len(trends)}")

    for prediction in await service.predict_attendance_risk_for_students(['STU001', 'STU002']):
        print(f"  {prediction.student_id}: {prediction.risk_level.value} "
              f"({prediction.predicted_attendance}%) - {prediction.explanation}")

    print("\nClass summaries:")
    for summary in await service.get_class_attendance_summaries():
        print(f"  {summary.class_id}-{summary.section}: {summary.percentage}% "
              f"({summary.present}/{summary.total})")

    print("\nFrequent absentees:")
    for absentee in await service.get_frequent_absentees():
        print(f"  {absentee.student_id} {absentee.student_name}: {absentee.percentage}%")


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_demo())
