from __future__ import annotations

from datetime import timedelta

import pytest

from src.attendance_admission.attendance_admission.attendance.service import (
    AttendanceHistoryService,
    AttendanceStateMachine,
)
from src.attendance_admission.attendance_admission.core.enums import AdmissionError, CheckFlag, ProofMethod
from src.attendance_admission.attendance_admission.core.exceptions import AdmissionRejected
from src.attendance_admission.attendance_admission.policy.model import Coordinate
from tests.fakes import InMemoryAttendance


def test_checkout_after_125_minutes_records_125(fixed_now):
    repo = InMemoryAttendance()
    sm = AttendanceStateMachine(repo)

    sm.check_in(user_id="u-1", method=ProofMethod.EMBEDDING, location=Coordinate(1, 2), now=fixed_now)
    result = sm.check_out(user_id="u-1", now=fixed_now + timedelta(minutes=125))

    assert result.total_minutes == 125
    assert result.location_flag == CheckFlag.VALID
    stored = repo.records[result.record.attendance_id]
    assert stored.check_out_time == fixed_now + timedelta(minutes=125)
    assert stored.location_lat == 1


def test_checkout_without_open_record_is_no_active_session(fixed_now):
    sm = AttendanceStateMachine(InMemoryAttendance())

    with pytest.raises(AdmissionRejected) as exc:
        sm.check_out(user_id="u-1", now=fixed_now)

    assert exc.value.error == AdmissionError.NO_ACTIVE_SESSION


def test_checkout_closes_latest_open_record(fixed_now):
    repo = InMemoryAttendance()
    sm = AttendanceStateMachine(repo)
    first = sm.check_in(user_id="u-1", method=ProofMethod.CODE, now=fixed_now)
    second = sm.check_in(user_id="u-1", method=ProofMethod.CODE, now=fixed_now + timedelta(minutes=10))

    result = sm.check_out(user_id="u-1", now=fixed_now + timedelta(minutes=40))

    assert result.record.attendance_id == second.attendance_id
    assert result.total_minutes == 30
    assert repo.records[first.attendance_id].is_open


def test_checkout_flags_are_soft(fixed_now):
    sm = AttendanceStateMachine(InMemoryAttendance())
    sm.check_in(user_id="u-1", method=ProofMethod.EMBEDDING, now=fixed_now)

    result = sm.check_out(user_id="u-1", location_passed=False, wifi_passed=False, now=fixed_now)

    assert result.location_flag == CheckFlag.OUTSIDE_RADIUS
    assert result.wifi_flag == CheckFlag.UNAUTHORIZED
    assert result.total_minutes == 0


def test_checkout_clock_skew_never_negative(fixed_now):
    sm = AttendanceStateMachine(InMemoryAttendance())
    sm.check_in(user_id="u-1", method=ProofMethod.EMBEDDING, now=fixed_now)

    result = sm.check_out(user_id="u-1", now=fixed_now - timedelta(minutes=5))

    assert result.total_minutes == 0


def test_lost_close_race_is_no_active_session(fixed_now):
    repo = InMemoryAttendance()
    sm = AttendanceStateMachine(repo)
    sm.check_in(user_id="u-1", method=ProofMethod.EMBEDDING, now=fixed_now)
    repo.lose_next_close = True

    with pytest.raises(AdmissionRejected) as exc:
        sm.check_out(user_id="u-1", now=fixed_now + timedelta(minutes=1))

    assert exc.value.error == AdmissionError.NO_ACTIVE_SESSION


def test_duplicate_checkin_allowed_by_default(fixed_now, caplog):
    repo = InMemoryAttendance()
    sm = AttendanceStateMachine(repo)

    sm.check_in(user_id="u-1", method=ProofMethod.EMBEDDING, now=fixed_now)
    sm.check_in(user_id="u-1", method=ProofMethod.EMBEDDING, now=fixed_now + timedelta(minutes=1))

    assert len(repo.records) == 2
    assert "still open" in caplog.text


def test_duplicate_checkin_can_be_rejected(fixed_now):
    sm = AttendanceStateMachine(InMemoryAttendance(), reject_duplicate_checkin=True)
    sm.check_in(user_id="u-1", method=ProofMethod.EMBEDDING, now=fixed_now)

    with pytest.raises(AdmissionRejected) as exc:
        sm.check_in(user_id="u-1", method=ProofMethod.EMBEDDING, now=fixed_now)

    assert exc.value.error == AdmissionError.ALREADY_CHECKED_IN


def test_history_is_latest_first_with_duration(fixed_now):
    repo = InMemoryAttendance()
    sm = AttendanceStateMachine(repo)
    sm.check_in(user_id="u-1", method=ProofMethod.EMBEDDING, now=fixed_now)
    sm.check_out(user_id="u-1", now=fixed_now + timedelta(minutes=510))
    sm.check_in(user_id="u-1", method=ProofMethod.CODE, now=fixed_now + timedelta(days=1))

    items = AttendanceHistoryService(repo).history("u-1")

    assert [i.duration for i in items] == [None, "8h 30m"]
