from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..admission.controller import token_required
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..container import Container


def register(app: Flask, container: Container) -> None:
    auth = token_required(container)

    @app.route("/attendance/history", methods=["GET"], endpoint="attendance_history")
    @auth
    def attendance_history():
        try:
            limit = int(request.args.get("limit", DEFAULT_HISTORY_LIMIT))
        except ValueError:
            limit = DEFAULT_HISTORY_LIMIT
        limit = max(1, min(limit, 200))

        items = container.history_service.history(g.user_id, limit=limit)
        return jsonify({
            "success": True,
            "data": [
                {
                    "attendance_id": i.attendance_id,
                    "check_in_time": i.check_in_time.isoformat(),
                    "check_out_time": i.check_out_time.isoformat() if i.check_out_time else None,
                    "total_minutes": i.total_minutes,
                    "duration": i.duration,
                    "status": i.status.value,
                    "verification_method": i.verification_method.value,
                }
                for i in items
            ],
        }), 200
