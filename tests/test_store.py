"""
Unit Tests for the Record Stores
"""
import json
from datetime import date

import pytest

from attendance_insights.store import (
    AttendanceQuery,
    AttendanceStoreError,
    InMemoryAttendanceStore,
    JsonFileAttendanceStore,
)


class TestAttendanceQuery:
    """Tests for query filtering"""

    def test_empty_query_matches_everything(self, make_raw):
        assert AttendanceQuery().matches(make_raw())

    def test_filters_by_identity_fields(self, make_raw):
        raw = make_raw(student_id='S1', class_id='10', section='A')

        assert AttendanceQuery(student_id='S1').matches(raw)
        assert not AttendanceQuery(student_id='S2').matches(raw)
        assert AttendanceQuery(class_id='10', section='A').matches(raw)
        assert not AttendanceQuery(class_id='10', section='B').matches(raw)

    def test_snake_case_keys(self):
        raw = {'student_id': 'S1', 'class_id': '10', 'section': 'A', 'date': '2026-01-01'}
        assert AttendanceQuery(student_id='S1', class_id='10').matches(raw)

    def test_date_from(self, make_raw):
        assert AttendanceQuery(date_from=date(2026, 1, 10)).matches(make_raw(days_ago=10))
        assert not AttendanceQuery(date_from=date(2026, 1, 10)).matches(make_raw(days_ago=11))

    def test_unparseable_date_passes_through(self, make_raw):
        """Malformed dates are left for the normalizer to count"""
        raw = make_raw(date='garbage')
        assert AttendanceQuery(date_from=date(2026, 1, 10)).matches(raw)


class TestInMemoryAttendanceStore:
    """Tests for the in-memory store"""

    @pytest.mark.asyncio
    async def test_query_filters(self, make_raw):
        store = InMemoryAttendanceStore([make_raw(student_id='S1'), make_raw(student_id='S2')])

        result = await store.query_attendance(AttendanceQuery(student_id='S2'))

        assert [r['studentId'] for r in result] == ['S2']

    @pytest.mark.asyncio
    async def test_returns_copies(self, make_raw):
        store = InMemoryAttendanceStore([make_raw()])

        result = await store.query_attendance()
        result[0]['status'] = 'absent'

        assert store.records[0]['status'] == 'present'

    @pytest.mark.asyncio
    async def test_add_records(self, make_raw):
        store = InMemoryAttendanceStore()
        store.add_records([make_raw(), make_raw()])

        assert len(await store.query_attendance()) == 2


class TestJsonFileAttendanceStore:
    """Tests for the JSON file store"""

    @pytest.mark.asyncio
    async def test_save_and_query(self, tmp_path, make_raw):
        path = tmp_path / 'data' / 'attendance.json'
        store = JsonFileAttendanceStore(str(path))

        await store.save([make_raw(student_id='S1'), make_raw(student_id='S2', section='B')])
        result = await store.query_attendance(AttendanceQuery(section='B'))

        assert path.exists()
        assert [r['studentId'] for r in result] == ['S2']

    @pytest.mark.asyncio
    async def test_save_writes_dates_as_strings(self, tmp_path):
        path = tmp_path / 'attendance.json'
        store = JsonFileAttendanceStore(str(path))

        await store.save([{'studentId': 'S1', 'date': date(2026, 1, 5), 'status': 'present'}])

        assert json.loads(path.read_text(encoding='utf-8'))[0]['date'] == '2026-01-05'

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, tmp_path):
        store = JsonFileAttendanceStore(str(tmp_path / 'missing.json'))

        with pytest.raises(AttendanceStoreError, match='not found'):
            await store.query_attendance()

    @pytest.mark.asyncio
    async def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / 'attendance.json'
        path.write_text('{not json', encoding='utf-8')

        with pytest.raises(AttendanceStoreError):
            await JsonFileAttendanceStore(str(path)).query_attendance()

    @pytest.mark.asyncio
    async def test_non_array_file_raises(self, tmp_path):
        path = tmp_path / 'attendance.json'
        path.write_text('{"records": []}', encoding='utf-8')

        with pytest.raises(AttendanceStoreError, match='JSON array'):
            await JsonFileAttendanceStore(str(path)).query_attendance()


class TestNumericIdentifiers:
    """Stores holding numbers for ids match the same text ids the normalizer produces"""

    def test_numeric_fields_match_text_query(self):
        raw = {'studentId': 101, 'class': 10, 'section': 'A', 'date': '2026-01-20'}

        assert AttendanceQuery(student_id='101').matches(raw)
        assert AttendanceQuery(class_id='10', section='A').matches(raw)
        assert not AttendanceQuery(student_id='10').matches(raw)

    def test_missing_section_does_not_match(self):
        raw = {'studentId': 'S1', 'class': '10', 'date': '2026-01-20'}
        assert not AttendanceQuery(section='A').matches(raw)
