from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import admin_required, json_errors, login_required, outcome_response, to_json
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route(
        "/api/conferences/<conference_id>/participants/<participant_id>/toggle",
        methods=["POST"],
        endpoint="attendance_toggle",
    )
    @admin_required
    @json_errors
    def attendance_toggle(conference_id: str, participant_id: str):
        """Admin toggle: ``{"zone_id": null}`` checks out, a zone id moves the participant there."""

        data = request.get_json(silent=True) or {}
        zone_id = (data.get("zone_id") or "").strip() or None
        outcome = container.manual_toggle.apply(conference_id, participant_id, zone_id)
        return outcome_response(outcome)

    @app.route(
        "/api/conferences/<conference_id>/participants/<participant_id>/reset-minutes",
        methods=["POST"],
        endpoint="attendance_reset_minutes",
    )
    @admin_required
    @json_errors
    def attendance_reset_minutes(conference_id: str, participant_id: str):
        data = request.get_json(silent=True) or {}
        outcome = container.attendance_service.reset_minutes(
            conference_id,
            participant_id,
            current_role=session.get("role"),
            actor=str(session.get("user_id")),
            reason=(data.get("reason") or "").strip() or None,
        )
        return outcome_response(outcome)

    @app.route(
        "/api/conferences/<conference_id>/participants/<participant_id>/attendance",
        methods=["GET"],
        endpoint="attendance_detail",
    )
    @admin_required
    @json_errors
    def attendance_detail(conference_id: str, participant_id: str):
        record = container.attendance_service.get_record(conference_id, participant_id)
        projection = container.live_projector.project_record(record)
        return jsonify({"success": True, "record": to_json(record), "live": to_json(projection)}), 200

    @app.route("/api/conferences/<conference_id>/me/live", methods=["GET"], endpoint="attendance_my_live")
    @login_required
    @json_errors
    def attendance_my_live(conference_id: str):
        """Participant badge page: own live minutes, by session or by ``?badge=`` QR text."""

        participant_id = session.get("participant_id")
        badge = (request.args.get("badge") or "").strip()
        if badge:
            participant_id = container.participant_service.resolve_badge(conference_id, badge).participant_id
        if not participant_id:
            raise ValidationError("No participant linked to this session")

        view = container.live_projector.participant_view(conference_id, str(participant_id))
        return jsonify({"success": True, **to_json(view)}), 200

    @app.route("/api/conferences/<conference_id>/attendance/live", methods=["GET"], endpoint="attendance_live")
    @admin_required
    @json_errors
    def attendance_live(conference_id: str):
        table = container.live_projector.project_table(conference_id, search=request.args.get("q", ""))
        return jsonify({"success": True, **to_json(table)}), 200

    @app.route(
        "/api/conferences/<conference_id>/attendance/batch-checkout",
        methods=["POST"],
        endpoint="attendance_batch_checkout",
    )
    @admin_required
    @json_errors
    def attendance_batch_checkout(conference_id: str):
        data = request.get_json(silent=True) or {}
        zone_id = (data.get("zone_id") or "").strip() or None
        result = container.attendance_service.batch_check_out(conference_id, zone_id=zone_id)
        return jsonify({"success": not result.failures, **to_json(result)}), 200

    @app.route(
        "/api/conferences/<conference_id>/attendance/auto-checkout",
        methods=["POST"],
        endpoint="attendance_auto_checkout",
    )
    @admin_required
    @json_errors
    def attendance_auto_checkout(conference_id: str):
        data = request.get_json(silent=True) or {}
        now = now_local()
        day = parse_iso_date(data["date"]) if data.get("date") else now.date()
        result = container.attendance_service.auto_checkout(conference_id, day, now=now)
        return jsonify({"success": not result.failures, **to_json(result)}), 200
