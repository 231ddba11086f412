"""Thông điệp hiển thị cho người dùng theo mã lỗi máy chủ."""
from __future__ import annotations

from typing import Optional

from ..core.enums import AdmissionError
from .model import SubmitResult, SubmitStatus

GENERIC_ERROR = "Attendance could not be recorded. Please try again."

ERROR_MESSAGES = {
    AdmissionError.LOCATION_INVALID: "You are outside the allowed office area.",
    AdmissionError.WIFI_INVALID: "Please connect to the office Wi-Fi.",
    AdmissionError.FACE_MISMATCH: "Face verification failed. Please try again.",
    AdmissionError.NO_FACE_PROFILE: "No face profile found. Please enroll first.",
    AdmissionError.EMBEDDING_MISMATCH: "Your face profile is outdated. Please re-enroll.",
    AdmissionError.INVALID_CODE: "The code is invalid or has expired.",
    AdmissionError.NO_ACTIVE_SESSION: "You have not checked in yet.",
    AdmissionError.MISSING_PROOF: "Face scan or code is required.",
    AdmissionError.CONFIG_ERROR: "Attendance is not configured. Contact your administrator.",
    AdmissionError.INVALID_REQUEST: "The request was not valid.",
    AdmissionError.ALREADY_CHECKED_IN: "You are already checked in.",
    AdmissionError.STORAGE_ERROR: "Server error. Please try again later.",
    AdmissionError.REQUEST_IN_PROGRESS: "Your attendance is still being processed.",
}


def message_for_error(tag: Optional[str]) -> str:
    try:
        return ERROR_MESSAGES[AdmissionError(tag)]
    except ValueError:
        return GENERIC_ERROR


def message_for_result(result: SubmitResult) -> str:
    if result.status == SubmitStatus.ACCEPTED:
        return str(result.body.get("message") or "Attendance recorded.")
    if result.status == SubmitStatus.QUEUED:
        return "You are offline. Attendance will be sent when the connection is back."
    if result.status == SubmitStatus.UNAUTHORIZED:
        return "Your session has expired. Please sign in again."
    return message_for_error(result.error)
