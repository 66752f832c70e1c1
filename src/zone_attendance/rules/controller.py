from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import admin_required, json_errors, login_required, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/conferences/<conference_id>/rules", methods=["GET"], endpoint="rules_list")
    @admin_required
    @json_errors
    def rules_list(conference_id: str):
        rules = container.rule_service.list_rules(conference_id)
        return jsonify({"success": True, "rules": [r.to_dict() for r in rules]}), 200

    @app.route("/api/conferences/<conference_id>/rules/<day>", methods=["GET"], endpoint="rules_get")
    @admin_required
    @json_errors
    def rules_get(conference_id: str, day: str):
        rule = container.rule_service.get_rule(conference_id, parse_iso_date(day))
        return jsonify({"success": True, "rule": rule.to_dict()}), 200

    @app.route("/api/conferences/<conference_id>/rules/<day>", methods=["PUT"], endpoint="rules_save")
    @admin_required
    @json_errors
    def rules_save(conference_id: str, day: str):
        payload = dict(request.get_json(silent=True) or {})
        payload["date"] = day
        rule = container.rule_service.save_rule(conference_id, payload)
        return jsonify({"success": True, "rule": rule.to_dict()}), 200

    @app.route("/api/conferences/<conference_id>/zones", methods=["GET"], endpoint="zones_list")
    @login_required
    @json_errors
    def zones_list(conference_id: str):
        choices = container.rule_service.kiosk_zones(conference_id)
        zones = [
            {"date": to_json(c.rule.date), **c.zone.to_dict()}
            for c in choices
        ]
        return jsonify({"success": True, "zones": zones}), 200
