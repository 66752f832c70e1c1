from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.http import admin_required, json_errors, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route(
        "/api/societies/<society_id>/members/<member_id>/reset-usage",
        methods=["POST"],
        endpoint="membership_reset_usage",
    )
    @admin_required
    @json_errors
    def membership_reset_usage(society_id: str, member_id: str):
        member = container.membership_service.reset_usage(
            current_role=session.get("role"),
            society_id=society_id,
            member_id=member_id,
            actor=str(session.get("user_id")),
        )
        return jsonify({"success": True, "member": to_json(member)}), 200

    @app.route(
        "/api/societies/<society_id>/members/<member_id>/usage-history",
        methods=["GET"],
        endpoint="membership_usage_history",
    )
    @admin_required
    @json_errors
    def membership_usage_history(society_id: str, member_id: str):
        history = container.membership_service.usage_history(society_id, member_id)
        return jsonify({"success": True, "history": to_json(history)}), 200
