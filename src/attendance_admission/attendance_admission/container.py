from __future__ import annotations

from dataclasses import dataclass

from .admission.mysql_receipt_repository import MySQLReceiptRepository
from .admission.service import AdmissionService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceHistoryService, AttendanceStateMachine
from .auth.tokens import TokenService
from .biometrics.enrollment import EnrollmentService
from .biometrics.matcher import EmbeddingMatcher
from .biometrics.mysql_face_profile_repository import MySQLFaceProfileRepository
from .codes.rotating_code import RotatingCodeService
from .core.constants import EXPECTED_EMBEDDING_SIZE
from .database.connection import DBConfig, DatabaseConnection
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.service import AdminNotifier
from .policy.mysql_settings_repository import MySQLSettingsRepository
from .policy.service import PolicyService


@dataclass(frozen=True)
class Container:
    token_service: TokenService
    policy_service: PolicyService
    code_service: RotatingCodeService
    admission_service: AdmissionService
    enrollment_service: EnrollmentService
    history_service: AttendanceHistoryService


def build_container(
    *,
    db_config: dict,
    jwt_secret: str,
    jwt_algorithm: str = "HS256",
    jwt_ttl_minutes: int = 60 * 12,
    reject_duplicate_checkin: bool = False,
    expected_embedding_size: int = EXPECTED_EMBEDDING_SIZE,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    settings_repo = MySQLSettingsRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    profiles_repo = MySQLFaceProfileRepository(conn)
    receipts_repo = MySQLReceiptRepository(conn)
    notifications_repo = MySQLNotificationRepository(conn)

    policy_service = PolicyService(settings_repo)
    code_service = RotatingCodeService()
    state_machine = AttendanceStateMachine(attendance_repo, reject_duplicate_checkin=reject_duplicate_checkin)
    admission_service = AdmissionService(
        policy=policy_service,
        state_machine=state_machine,
        profiles=profiles_repo,
        receipts=receipts_repo,
        notifier=AdminNotifier(notifications_repo),
        matcher=EmbeddingMatcher(),
        codes=code_service,
    )

    return Container(
        token_service=TokenService(jwt_secret, algorithm=jwt_algorithm, ttl_minutes=jwt_ttl_minutes),
        policy_service=policy_service,
        code_service=code_service,
        admission_service=admission_service,
        enrollment_service=EnrollmentService(profiles_repo, expected_size=expected_embedding_size),
        history_service=AttendanceHistoryService(attendance_repo),
    )
