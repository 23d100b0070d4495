"""
Attendance Risk Classifier
Heuristic risk assessment for one student's attendance trend.

The window sizes and thresholds below are fixed heuristics; changing
them changes every prediction the dashboards show.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Sequence

import numpy as np

from .aggregation import round_half_up
from .trends import AttendanceTrend

# Configure logging
logger = logging.getLogger(__name__)

MIN_TREND_POINTS = 5
WINDOW_SIZE = 7

HIGH_RISK_BELOW = 70
MEDIUM_RISK_BELOW = 80
DECLINE_THRESHOLD = -5
CONSISTENCY_THRESHOLD = 60

DEFAULT_PREDICTED_ATTENDANCE = 90
INSUFFICIENT_DATA_EXPLANATION = 'Insufficient data for accurate prediction'
PREDICTION_ERROR_EXPLANATION = 'Error in prediction algorithm'


class RiskLevel(Enum):
    """Risk tiers for continued poor attendance."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class AttendancePrediction:
    """Risk assessment for one student."""
    student_id: str
    risk_level: RiskLevel
    predicted_attendance: int
    explanation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'studentId': self.student_id,
            'riskLevel': self.risk_level.value,
            'predictedAttendance': self.predicted_attendance,
            'explanation': self.explanation,
        }


@dataclass(frozen=True)
class TrendMetrics:
    """Intermediate values the classification is based on."""
    recent_avg: float
    previous_avg: float
    trend_change: float
    consistency: float


def default_prediction(student_id: str, explanation: str = INSUFFICIENT_DATA_EXPLANATION) -> AttendancePrediction:
    """Optimistic default used when there is nothing to classify."""
    return AttendancePrediction(
        student_id=student_id,
        risk_level=RiskLevel.LOW,
        predicted_attendance=DEFAULT_PREDICTED_ATTENDANCE,
        explanation=explanation,
    )


class RiskClassifier:
    """
    Classifies a chronological trend into a risk tier.

    The last 7 points are the recent window and the 7 before them the
    previous window. When fewer than 7 points precede the recent window
    the previous window is the recent one, so the trend change is 0.
    Consistency is 100 minus the population standard deviation over the
    whole trend.
    """

    def compute_metrics(self, trends: Sequence[AttendanceTrend]) -> TrendMetrics:
        """
        Compute the averages, trend change and consistency for a trend.

        Args:
            trends: Chronological trend points, at least one

        Returns:
            TrendMetrics for the series
        """
        values = np.array([t.percentage for t in trends], dtype=float)
        if values.size == 0:
            raise ValueError("Cannot compute metrics for an empty trend")

        recent = values[-WINDOW_SIZE:]
        earlier = values[:-WINDOW_SIZE]
        previous = earlier[-WINDOW_SIZE:] if earlier.size >= WINDOW_SIZE else recent

        recent_avg = float(np.mean(recent))
        previous_avg = float(np.mean(previous))
        consistency = 100.0 - float(np.sqrt(np.var(values)))

        return TrendMetrics(
            recent_avg=recent_avg,
            previous_avg=previous_avg,
            trend_change=recent_avg - previous_avg,
            consistency=consistency,
        )

    def classify(self, student_id: str, trends: Sequence[AttendanceTrend]) -> AttendancePrediction:
        """
        Classify a student's attendance risk.

        Args:
            student_id: Student the trend belongs to
            trends: Chronological trend points

        Returns:
            AttendancePrediction with tier, predicted percentage and reason
        """
        if len(trends) < MIN_TREND_POINTS:
            return default_prediction(student_id)

        metrics = self.compute_metrics(trends)

        # First match wins
        if metrics.recent_avg < HIGH_RISK_BELOW:
            risk_level, explanation = RiskLevel.HIGH, 'Attendance below 70%'
        elif metrics.recent_avg < MEDIUM_RISK_BELOW:
            risk_level, explanation = RiskLevel.MEDIUM, 'Attendance between 70-80%'
        elif metrics.trend_change < DECLINE_THRESHOLD:
            risk_level, explanation = RiskLevel.MEDIUM, 'Declining attendance trend'
        elif metrics.consistency < CONSISTENCY_THRESHOLD:
            risk_level, explanation = RiskLevel.MEDIUM, 'Inconsistent attendance pattern'
        else:
            risk_level, explanation = RiskLevel.LOW, 'Good attendance record'

        predicted = round_half_up(metrics.recent_avg + metrics.trend_change)
        predicted = max(0, min(100, predicted))

        logger.debug(
            f"Risk for student {student_id}: {risk_level.value} "
            f"(recent={metrics.recent_avg:.2f}, change={metrics.trend_change:.2f}, "
            f"consistency={metrics.consistency:.2f})"
        )

        return AttendancePrediction(
            student_id=student_id,
            risk_level=risk_level,
            predicted_attendance=predicted,
            explanation=explanation,
        )
