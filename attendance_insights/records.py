"""
Attendance Record Model and Normalizer
Converts raw attendance entries coming from a record store into
canonical in-memory records with a single calendar-date type.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

# Configure logging
logger = logging.getLogger(__name__)


class AttendanceInsightsError(Exception):
    """Base error for the attendance insights package."""


class RecordNormalizationError(AttendanceInsightsError, ValueError):
    """Raised when a raw record cannot be turned into an AttendanceRecord."""


class AttendanceStatus(Enum):
    """Attendance status for one student on one date."""
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"

    @classmethod
    def parse(cls, value: Any) -> 'AttendanceStatus':
        """Parse a status value, ignoring case and surrounding whitespace."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise RecordNormalizationError(f"Invalid status: {value!r}")
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = [s.value for s in cls]
            raise RecordNormalizationError(
                f"Invalid status: {value!r}. Must be one of {valid}"
            ) from None


# Statuses that count toward the attendance rate
COUNTED_AS_PRESENT = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.LATE})


@dataclass(frozen=True)
class AttendanceRecord:
    """One student's attendance status on one date."""
    id: str
    student_id: str
    student_name: str
    class_id: str
    section: str
    date: date
    status: AttendanceStatus
    remarks: Optional[str] = None

    @property
    def counts_as_present(self) -> bool:
        return self.status in COUNTED_AS_PRESENT

    @property
    def date_key(self) -> str:
        """ISO calendar date used as the grouping and sort key."""
        return self.date.isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase shape used by the dashboards."""
        data = {
            'id': self.id,
            'studentId': self.student_id,
            'studentName': self.student_name,
            'class': self.class_id,
            'section': self.section,
            'date': self.date_key,
            'status': self.status.value,
        }
        if self.remarks is not None:
            data['remarks'] = self.remarks
        return data


@dataclass
class NormalizationReport:
    """Diagnostic counts produced by a batch normalization."""
    total: int = 0
    accepted: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'accepted': self.accepted,
            'skipped': self.skipped,
            'errors': list(self.errors),
        }


def _first_present(raw: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def parse_record_date(value: Any) -> date:
    """
    Resolve a stored date representation to a calendar date.

    Args:
        value: date, datetime, store timestamp object or ISO-8601 string

    Returns:
        The calendar date. Aware timestamps are read in UTC.

    Raises:
        RecordNormalizationError: if the value is missing or unparseable
    """
    if value is None:
        raise RecordNormalizationError("Missing required field: date")

    # Store-native timestamp objects
    if not isinstance(value, (date, str)):
        for converter in ('to_datetime', 'ToDatetime', 'toDate'):
            if callable(getattr(value, converter, None)):
                value = getattr(value, converter)()
                break

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return parse_record_date(datetime.fromisoformat(text))
        except ValueError:
            raise RecordNormalizationError(f"Invalid date format: {value!r}") from None

    raise RecordNormalizationError(f"Unsupported date type: {type(value).__name__}")


class RecordNormalizer:
    """
    Turns raw store entries into AttendanceRecord objects.

    Both camelCase (``studentId``) and snake_case (``student_id``) keys
    are accepted.
    """

    def normalize(self, raw: Dict[str, Any]) -> AttendanceRecord:
        """
        Normalize a single raw record.

        Args:
            raw: Raw attendance record dictionary

        Returns:
            Normalized AttendanceRecord

        Raises:
            RecordNormalizationError: if the record is malformed
        """
        if not isinstance(raw, dict):
            raise RecordNormalizationError(f"Record must be a mapping, got {type(raw).__name__}")

        student_id = _first_present(raw, 'studentId', 'student_id')
        if student_id in (None, ''):
            raise RecordNormalizationError("Missing required field: studentId")

        remarks = raw.get('remarks')
        return AttendanceRecord(
            id=str(_first_present(raw, 'id', '_id') or ''),
            student_id=str(student_id),
            student_name=str(_first_present(raw, 'studentName', 'student_name', 'name') or ''),
            class_id=str(_first_present(raw, 'class', 'classId', 'class_id') or ''),
            section=str(raw.get('section') or ''),
            date=parse_record_date(raw.get('date')),
            status=AttendanceStatus.parse(raw.get('status')),
            remarks=str(remarks) if remarks is not None else None,
        )

    def normalize_all(
        self, raws: Iterable[Dict[str, Any]]
    ) -> Tuple[List[AttendanceRecord], NormalizationReport]:
        """
        Normalize a batch, skipping malformed records.

        Args:
            raws: Raw attendance records

        Returns:
            Tuple of (normalized records, report of what was skipped)
        """
        records = []
        report = NormalizationReport()

        for raw in raws:
            report.total += 1
            try:
                records.append(self.normalize(raw))
                report.accepted += 1
            except RecordNormalizationError as e:
                report.skipped += 1
                record_id = raw.get('id', '?') if isinstance(raw, dict) else '?'
                report.errors.append(f"{record_id}: {e}")
                logger.warning(f"Skipping attendance record {record_id}: {e}")

        if report.skipped:
            logger.warning(
                f"Skipped {report.skipped} of {report.total} attendance records during normalization"
            )

        return records, report
