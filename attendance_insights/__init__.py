"""
Attendance analytics: daily trends, class summaries and risk prediction
over attendance records held in an external record store.
"""

from .aggregation import AttendanceSummary, ClassAttendanceSummary, FrequentAbsentee
from .config import AnalyticsConfig
from .records import (
    AttendanceInsightsError,
    AttendanceRecord,
    AttendanceStatus,
    NormalizationReport,
    RecordNormalizationError,
    RecordNormalizer,
)
from .risk import AttendancePrediction, RiskClassifier, RiskLevel
from .service import (
    AttendanceAnalyticsService,
    get_class_attendance_summaries,
    get_class_attendance_trends,
    get_frequent_absentees,
    get_student_attendance_trends,
    predict_attendance_risk,
)
from .store import (
    AttendanceQuery,
    AttendanceStore,
    AttendanceStoreError,
    InMemoryAttendanceStore,
    JsonFileAttendanceStore,
)
from .trends import AttendanceTrend

__version__ = '1.0.0'
