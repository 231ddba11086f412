from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.attendance_admission.attendance_admission.admission.service import AdmissionService
from src.attendance_admission.attendance_admission.attendance.service import (
    AttendanceHistoryService,
    AttendanceStateMachine,
)
from src.attendance_admission.attendance_admission.auth.tokens import TokenService
from src.attendance_admission.attendance_admission.biometrics.enrollment import EnrollmentService
from src.attendance_admission.attendance_admission.codes.rotating_code import RotatingCodeService
from src.attendance_admission.attendance_admission.container import Container
from src.attendance_admission.attendance_admission.notifications.service import AdminNotifier
from src.attendance_admission.attendance_admission.policy.service import PolicyService
from tests.fakes import (
    InMemoryAttendance,
    InMemoryNotifications,
    InMemoryProfiles,
    InMemoryReceipts,
    InMemorySettings,
    OFFICE,
    pair_at,
)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 8, 0, 0, tzinfo=timezone.utc)


class AdmissionHarness:
    """Admission service wired to in-memory stores."""

    def __init__(self, *, settings=None, profiles=None, reject_duplicate_checkin=False, notifications_fail=False):
        self.settings = InMemorySettings(settings)
        self.profiles = InMemoryProfiles(profiles)
        self.attendance = InMemoryAttendance()
        self.receipts = InMemoryReceipts()
        self.notifications = InMemoryNotifications(fail=notifications_fail)
        self.policy = PolicyService(self.settings)
        self.codes = RotatingCodeService()
        self.service = AdmissionService(
            policy=self.policy,
            state_machine=AttendanceStateMachine(
                self.attendance, reject_duplicate_checkin=reject_duplicate_checkin
            ),
            profiles=self.profiles,
            receipts=self.receipts,
            notifier=AdminNotifier(self.notifications),
            codes=self.codes,
        )

    def container(self, token_service: TokenService) -> Container:
        return Container(
            token_service=token_service,
            policy_service=self.policy,
            code_service=self.codes,
            admission_service=self.service,
            enrollment_service=EnrollmentService(self.profiles),
            history_service=AttendanceHistoryService(self.attendance),
        )


@pytest.fixture
def harness_factory():
    return AdmissionHarness


@pytest.fixture
def token_service() -> TokenService:
    return TokenService("test-jwt-secret", ttl_minutes=60)


@pytest.fixture
def harness() -> AdmissionHarness:
    stored, _ = pair_at(0.15, 0.95)
    return AdmissionHarness(
        settings={"office_location": OFFICE, "allowed_radius_meters": 100, "code_secret": "kiosk-secret"},
        profiles={"u-1": [stored]},
    )


@pytest.fixture
def app(monkeypatch, harness, token_service):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.attendance_admission.attendance_admission.main import create_app

    return create_app(container=harness.container(token_service))


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(token_service):
    def _headers(user_id: str = "u-1") -> dict:
        return {"Authorization": f"Bearer {token_service.issue(user_id)}"}

    return _headers
