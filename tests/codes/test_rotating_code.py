from __future__ import annotations

from datetime import timedelta

import pytest

from src.attendance_admission.attendance_admission.codes.qr import render_qr_png
from src.attendance_admission.attendance_admission.codes.rotating_code import RotatingCodeService, seconds_remaining
from src.attendance_admission.attendance_admission.core.exceptions import ConfigurationError


def test_issued_code_is_six_digits_and_verifies(fixed_now):
    svc = RotatingCodeService()

    code = svc.issue("kiosk-secret", 60, at=fixed_now)

    assert len(code.code) == 6 and code.code.isdigit()
    assert svc.verify(code.code, "kiosk-secret", 60, at=fixed_now)
    assert seconds_remaining(code, at=fixed_now) == 60


def test_previous_and_next_window_are_tolerated(fixed_now):
    svc = RotatingCodeService()
    code = svc.issue("kiosk-secret", 60, at=fixed_now).code

    assert svc.verify(code, "kiosk-secret", 60, at=fixed_now + timedelta(seconds=61))
    assert svc.verify(code, "kiosk-secret", 60, at=fixed_now - timedelta(seconds=1))
    assert not svc.verify(code, "kiosk-secret", 60, at=fixed_now + timedelta(minutes=5))


def test_wrong_secret_or_format_fails(fixed_now):
    svc = RotatingCodeService()
    code = svc.issue("kiosk-secret", 60, at=fixed_now).code

    assert not svc.verify(code, "other-secret", 60, at=fixed_now)
    assert not svc.verify("12a456", "kiosk-secret", 60, at=fixed_now)
    assert not svc.verify("", "kiosk-secret", 60, at=fixed_now)


def test_missing_secret_is_configuration_error(fixed_now):
    with pytest.raises(ConfigurationError):
        RotatingCodeService().verify("123456", None, 60, at=fixed_now)
    with pytest.raises(ConfigurationError):
        RotatingCodeService().issue("", 60, at=fixed_now)


def test_qr_render_returns_png():
    assert render_qr_png("123456").startswith(b"\x89PNG")
