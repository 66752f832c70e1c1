from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import admin_required, json_errors, to_json
from ..common.validators import require_non_negative
from ..container import Container
from ..core.constants import DEFAULT_LOG_LIMIT
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route(
        "/api/conferences/<conference_id>/participants/<participant_id>/logs",
        methods=["GET"],
        endpoint="audit_logs",
    )
    @admin_required
    @json_errors
    def audit_logs(conference_id: str, participant_id: str):
        limit = require_non_negative(request.args.get("limit", DEFAULT_LOG_LIMIT), "limit")
        if limit == 0:
            raise ValidationError("limit must be positive")

        rows = container.audit_service.get_history_ui(conference_id, participant_id, limit=limit)
        return jsonify({"success": True, "logs": to_json(rows)}), 200

    @app.route(
        "/api/conferences/<conference_id>/participants/<participant_id>/reconcile",
        methods=["GET"],
        endpoint="audit_reconcile",
    )
    @admin_required
    @json_errors
    def audit_reconcile(conference_id: str, participant_id: str):
        result = container.audit_service.reconcile(conference_id, participant_id)
        return jsonify({"success": True, "matches": result.matches, **to_json(result)}), 200
