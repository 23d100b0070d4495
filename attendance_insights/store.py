"""
Attendance Record Stores
Query interface to the external record store, with an in-memory store
and a JSON file store.
"""

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .records import AttendanceInsightsError, RecordNormalizationError, parse_record_date

# Configure logging
logger = logging.getLogger(__name__)


class AttendanceStoreError(AttendanceInsightsError):
    """Raised when the record store cannot be queried."""


@dataclass(frozen=True)
class AttendanceQuery:
    """Filter for an attendance query. Unset fields do not filter."""
    student_id: Optional[str] = None
    class_id: Optional[str] = None
    section: Optional[str] = None
    date_from: Optional[date] = None

    def matches(self, raw: Dict[str, Any]) -> bool:
        """
        Check whether a raw record passes this filter.

        Records with an unparseable date are kept so that the normalizer
        can report them.
        """
        if self.student_id is not None and _raw_text(raw, 'studentId', 'student_id') != self.student_id:
            return False
        if self.class_id is not None and _raw_text(raw, 'class', 'classId', 'class_id') != self.class_id:
            return False
        if self.section is not None and _raw_text(raw, 'section') != self.section:
            return False
        if self.date_from is not None:
            try:
                if parse_record_date(raw.get('date')) < self.date_from:
                    return False
            except RecordNormalizationError:
                return True
        return True


def _raw_field(raw: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _raw_text(raw: Dict[str, Any], *keys: str) -> str:
    """Field value as text, the way the normalizer stores it."""
    value = _raw_field(raw, *keys)
    return '' if value is None else str(value)


class AttendanceStore(ABC):
    """Abstract record store."""

    @abstractmethod
    async def query_attendance(self, query: AttendanceQuery = None) -> List[Dict[str, Any]]:
        """
        Fetch raw attendance records.

        Args:
            query: Optional filter

        Returns:
            List of raw record dictionaries

        Raises:
            AttendanceStoreError: if the store cannot be read
        """


class InMemoryAttendanceStore(AttendanceStore):
    """
    Store backed by a list of raw record dictionaries.
    """

    def __init__(self, records: Iterable[Dict[str, Any]] = None):
        self.records: List[Dict[str, Any]] = list(records or [])

    def add_records(self, records: Iterable[Dict[str, Any]]):
        """Append raw records to the store."""
        self.records.extend(records)

    async def query_attendance(self, query: AttendanceQuery = None) -> List[Dict[str, Any]]:
        query = query or AttendanceQuery()
        return [dict(r) for r in self.records if isinstance(r, dict) and query.matches(r)]


class JsonFileAttendanceStore(AttendanceStore):
    """
    Store backed by a JSON file holding an array of raw records.
    """

    def __init__(self, filepath: str):
        """
        Initialize the file store.

        Args:
            filepath: Path to the JSON file
        """
        self.filepath = filepath

    def _load(self) -> List[Dict[str, Any]]:
        if not os.path.exists(self.filepath):
            raise AttendanceStoreError(f"Attendance file not found: {self.filepath}")
        try:
            with open(self.filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise AttendanceStoreError(f"Failed to read attendance file {self.filepath}: {e}") from e

        if not isinstance(data, list):
            raise AttendanceStoreError(
                f"Attendance file {self.filepath} must contain a JSON array"
            )
        return data

    def _save(self, records: List[Dict[str, Any]]):
        folder = os.path.dirname(self.filepath)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(self.filepath, 'w', encoding='utf-8') as f:
            json.dump(records, f, ensure_ascii=False, indent=2, default=str)
        logger.info(f"Saved {len(records)} attendance records to {self.filepath}")

    async def query_attendance(self, query: AttendanceQuery = None) -> List[Dict[str, Any]]:
        query = query or AttendanceQuery()
        data = await asyncio.to_thread(self._load)
        records = [r for r in data if isinstance(r, dict) and query.matches(r)]
        logger.debug(f"Loaded {len(records)} of {len(data)} records from {self.filepath}")
        return records

    async def save(self, records: Iterable[Dict[str, Any]]):
        """
        Write raw records to the file, replacing its contents.

        Args:
            records: Raw attendance records; dates are written as strings
        """
        await asyncio.to_thread(self._save, list(records))
