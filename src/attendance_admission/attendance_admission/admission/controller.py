from __future__ import annotations

import io
import logging
from functools import wraps

from flask import Flask, g, jsonify, request, send_file

from ..auth.tokens import bearer_token
from ..codes.qr import decode_qr_image, render_qr_png
from ..codes.rotating_code import seconds_remaining
from ..core.enums import AdmissionError
from ..core.exceptions import AuthenticationError, ConfigurationError, EmbeddingDimensionError, ValidationError
from ..container import Container
from .model import AdmissionOutcome, AdmissionRequest

logger = logging.getLogger(__name__)


def _error(error: AdmissionError, message: str):
    return jsonify(AdmissionOutcome.rejected(error, message).body), error.http_status


def token_required(container: Container):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                g.user_id = container.token_service.verify(bearer_token(request.headers.get("Authorization")))
            except AuthenticationError as e:
                return jsonify({"success": False, "message": str(e)}), 401
            return view(*args, **kwargs)

        return wrapper

    return decorator


def register(app: Flask, container: Container) -> None:
    auth = token_required(container)

    def _admit(payload):
        try:
            admission_request = AdmissionRequest.from_payload(payload)
        except ValidationError as e:
            return _error(AdmissionError.INVALID_REQUEST, str(e))

        outcome = container.admission_service.verify(admission_request, authenticated_user_id=g.user_id)
        body, status = outcome.to_response()
        return jsonify(body), status

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"ok": True}), 200

    @app.route("/ping", methods=["GET"], endpoint="ping")
    @auth
    def ping():
        return jsonify({"ok": True}), 200

    @app.route("/verify", methods=["POST"], endpoint="verify_attendance")
    @auth
    def verify_attendance():
        return _admit(request.get_json(silent=True))

    @app.route("/verify/code-image", methods=["POST"], endpoint="verify_code_image")
    @auth
    def verify_code_image():
        """Chấm công bằng ảnh chụp mã QR ở quầy (multipart: image, type, lat, lng, ssid, bssid)."""

        upload = request.files.get("image")
        if upload is None:
            return _error(AdmissionError.INVALID_REQUEST, "image is required")

        try:
            codes = decode_qr_image(upload.read())
        except ValidationError as e:
            return _error(AdmissionError.INVALID_REQUEST, str(e))
        if not codes:
            return _error(AdmissionError.INVALID_CODE, "No QR code found in image")

        form = request.form
        payload = {
            "user_id": g.user_id,
            "type": form.get("type"),
            "code": codes[0],
            "network": {"ssid": form.get("ssid"), "bssid": form.get("bssid")},
            "idempotency_key": form.get("idempotency_key") or None,
        }
        if form.get("lat") and form.get("lng"):
            try:
                payload["location"] = {"lat": float(form["lat"]), "lng": float(form["lng"])}
            except ValueError:
                return _error(AdmissionError.INVALID_REQUEST, "lat/lng must be numbers")
        return _admit(payload)

    @app.route("/enroll", methods=["POST"], endpoint="enroll_face")
    @auth
    def enroll_face():
        body = request.get_json(silent=True) or {}
        user_id = str(body.get("user_id") or "")
        if not user_id:
            return _error(AdmissionError.INVALID_REQUEST, "user_id is required")
        if user_id != g.user_id:
            return jsonify({"success": False, "message": "Unauthorized: token does not match user_id"}), 403

        try:
            result = container.enrollment_service.enroll(
                user_id,
                face_embeddings=body.get("face_embeddings"),
                face_embedding=body.get("face_embedding"),
            )
        except EmbeddingDimensionError as e:
            return _error(AdmissionError.EMBEDDING_MISMATCH, str(e))
        except ValidationError as e:
            return _error(AdmissionError.INVALID_REQUEST, str(e))

        return jsonify({
            "success": True,
            "message": "Face profile enrolled",
            "user_id": result.user_id,
            "poses_stored": result.poses_stored,
            "dimension": result.dimension,
        }), 200

    @app.route("/code/qr", methods=["GET"], endpoint="code_qr")
    @auth
    def code_qr():
        """QR của mã xoay vòng hiện tại, để hiển thị ở quầy."""

        try:
            policy = container.policy_service.current()
            code = container.code_service.issue(policy.code_secret, policy.code_period_seconds)
        except ConfigurationError as e:
            logger.error("Cannot issue rotating code: %s", e)
            return _error(AdmissionError.CONFIG_ERROR, "Rotating code is not configured")

        response = send_file(io.BytesIO(render_qr_png(code.code)), mimetype="image/png")
        response.headers["Cache-Control"] = "no-store"
        response.headers["X-Code-Expires-In"] = str(seconds_remaining(code))
        return response
