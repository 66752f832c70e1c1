from __future__ import annotations

from flask import Flask, jsonify, request, send_file

from ..common.http import json_errors, login_required, to_json
from ..common.validators import require_non_empty
from ..container import Container
from ..core.enums import KioskState, ScannerMode
from ..core.exceptions import ValidationError
from ..participants.service import badge_qr_for
from .qr_codes import badge_png, decode_qr_image
from .service import BUSY, ScanResult


def _scan_response(result: ScanResult):
    body = {"success": result.state == KioskState.SUCCESS, **to_json(result)}
    if result.code == BUSY:
        return jsonify(body), 409
    if result.state == KioskState.ERROR:
        return jsonify(body), 400
    return jsonify(body), 200


def register(app: Flask, container: Container) -> None:
    @app.route("/api/conferences/<conference_id>/kiosks/<kiosk_id>", methods=["PUT"], endpoint="kiosk_configure")
    @login_required
    @json_errors
    def kiosk_configure(conference_id: str, kiosk_id: str):
        data = request.get_json(silent=True) or {}
        try:
            mode = ScannerMode(data.get("mode") or ScannerMode.AUTO.value)
        except ValueError:
            raise ValidationError(f"Unknown scanner mode {data.get('mode')!r}")

        session = container.kiosk_service.configure(
            kiosk_id,
            conference_id,
            zone_id=(data.get("zone_id") or "").strip() or None,
            mode=mode,
        )
        return jsonify(
            {"success": True, "kiosk_id": kiosk_id, "zone_id": session.zone_id, "mode": session.mode.value}
        ), 200

    @app.route("/api/conferences/<conference_id>/kiosks/<kiosk_id>/state", methods=["GET"], endpoint="kiosk_state")
    @login_required
    @json_errors
    def kiosk_state(conference_id: str, kiosk_id: str):
        result = container.kiosk_service.current_state(kiosk_id, conference_id)
        return jsonify({"success": True, **to_json(result)}), 200

    @app.route("/api/conferences/<conference_id>/kiosks/<kiosk_id>/scan", methods=["POST"], endpoint="kiosk_scan")
    @login_required
    @json_errors
    def kiosk_scan(conference_id: str, kiosk_id: str):
        data = request.get_json(silent=True) or {}
        code = require_non_empty(data.get("code") or "", "Scanned code")
        return _scan_response(container.kiosk_service.scan(kiosk_id, conference_id, code))

    @app.route(
        "/api/conferences/<conference_id>/kiosks/<kiosk_id>/scan-image",
        methods=["POST"],
        endpoint="kiosk_scan_image",
    )
    @login_required
    @json_errors
    def kiosk_scan_image(conference_id: str, kiosk_id: str):
        file = request.files.get("image")
        if not file:
            raise ValidationError("Please upload an image")
        code = decode_qr_image(file.stream)
        return _scan_response(container.kiosk_service.scan(kiosk_id, conference_id, code))

    @app.route(
        "/api/conferences/<conference_id>/participants/<participant_id>/badge.png",
        methods=["GET"],
        endpoint="participant_badge_qr",
    )
    @login_required
    @json_errors
    def participant_badge_qr(conference_id: str, participant_id: str):
        participant = container.participant_service.get(conference_id, participant_id)
        return send_file(badge_png(participant.badge_qr or badge_qr_for(participant.participant_id)), mimetype="image/png")
