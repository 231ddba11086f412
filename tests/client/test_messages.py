from __future__ import annotations

from src.attendance_admission.attendance_admission.client.messages import (
    GENERIC_ERROR,
    message_for_error,
    message_for_result,
)
from src.attendance_admission.attendance_admission.client.model import SubmitResult, SubmitStatus


def test_known_tags_have_specific_text():
    assert "office area" in message_for_error("LOCATION_INVALID")
    assert "enroll" in message_for_error("NO_FACE_PROFILE")


def test_unknown_tag_falls_back_to_generic():
    assert message_for_error("SOMETHING_NEW") == GENERIC_ERROR
    assert message_for_error(None) == GENERIC_ERROR


def test_queued_result_message():
    assert "offline" in message_for_result(SubmitResult(status=SubmitStatus.QUEUED, entry_id=1))
