from __future__ import annotations

from datetime import datetime
from typing import Optional

from flask import Flask, jsonify, request
from werkzeug.utils import secure_filename

from ..common.datetime_utils import parse_iso_date, to_local
from ..common.web import admin_required, current_employee_id, date_arg, error_response, json_errors, login_required
from ..container import Container
from .model import AttendanceRecord, ImportBatch

_TRUE = {"1", "true", "yes", "on"}


def _local_iso(value: Optional[datetime], tz: str) -> Optional[str]:
    return to_local(value, tz).isoformat() if value else None


def record_to_json(r: AttendanceRecord, tz: str) -> dict:
    return {
        "employeeId": r.employee_id,
        "date": r.business_day.isoformat(),
        "morningIn": _local_iso(r.morning_in, tz),
        "morningOut": _local_iso(r.morning_out, tz),
        "afternoonIn": _local_iso(r.afternoon_in, tz),
        "afternoonOut": _local_iso(r.afternoon_out, tz),
        "timeIn": _local_iso(r.time_in, tz),
        "timeOut": _local_iso(r.time_out, tz),
        "hoursWorked": r.hours_worked,
        "isLate": r.is_late,
        "lateMinutes": r.late_minutes,
        "isAbsent": r.is_absent,
        "isHalfDay": r.is_half_day,
        "isEarlyOut": r.is_early_out,
        "totalSessions": r.total_sessions,
        "sessionType": r.session_type.value if r.session_type else None,
        "approvalStatus": r.approval_status.value,
        "rejectionReason": r.rejection_reason,
        "notes": r.notes,
        "importBatchId": r.import_batch_id,
    }


def batch_to_json(b: ImportBatch) -> dict:
    return {
        "batchId": b.batch_id,
        "fileName": b.source_file_name,
        "size": b.source_size,
        "checksum": b.checksum,
        "uploadedBy": b.uploaded_by,
        "createdAt": b.created_at.isoformat(),
        "summary": b.summary,
    }


def register(app: Flask, container: Container) -> None:
    tz = container.policy.attendance.reference_timezone

    @app.route("/api/attendance/punch", methods=["POST"], endpoint="api_attendance_punch")
    @login_required
    @json_errors
    def punch():
        data = request.get_json(silent=True) or {}
        outcome = container.attendance_service.record_punch(current_employee_id(), data.get("direction"))
        body = {
            "success": outcome.accepted,
            "accepted": outcome.accepted,
            "message": outcome.reason,
            "record": record_to_json(outcome.record, tz) if outcome.record else None,
        }
        return jsonify(body), (200 if outcome.accepted else 409)

    @app.route("/api/attendance/me", methods=["GET"], endpoint="api_attendance_me")
    @login_required
    @json_errors
    def my_attendance():
        rows = container.attendance_service.history(
            current_employee_id(), start=date_arg("start"), end=date_arg("end")
        )
        return jsonify({"success": True, "records": [record_to_json(r, tz) for r in rows]})

    @app.route("/api/admin/attendance/import", methods=["POST"], endpoint="api_admin_attendance_import")
    @admin_required
    @json_errors
    def import_attendance():
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            return error_response("No file uploaded", 400)

        filename = secure_filename(upload.filename) or "attendance.csv"
        content = upload.read()
        force = str(request.form.get("force", "")).lower() in _TRUE

        importer = container.attendance_importer
        previous = importer.find_previous_import(content)
        if previous is not None and not force:
            return (
                jsonify(
                    {
                        "success": False,
                        "message": f"This file was already imported as batch {previous.batch_id}",
                        "repeatOfBatchId": previous.batch_id,
                    }
                ),
                409,
            )

        summary = importer.import_file(content, filename, uploaded_by=current_employee_id())
        return jsonify({"success": True, "summary": summary.as_dict()})

    @app.route("/api/admin/attendance/import/history", methods=["GET"], endpoint="api_admin_attendance_import_history")
    @admin_required
    @json_errors
    def import_history():
        limit = int(request.args.get("limit") or 20)
        batches = container.attendance_importer.list_batches(limit=limit)
        return jsonify({"success": True, "batches": [batch_to_json(b) for b in batches]})

    @app.route(
        "/api/admin/attendance/<int:employee_id>/<day>/approval",
        methods=["PATCH"],
        endpoint="api_admin_attendance_approval",
    )
    @admin_required
    @json_errors
    def decide_approval(employee_id: int, day: str):
        data = request.get_json(silent=True) or {}
        record = container.attendance_service.decide_approval(
            employee_id,
            parse_iso_date(day),
            action=str(data.get("action") or ""),
            reviewer_id=current_employee_id(),
            reason=data.get("reason"),
        )
        return jsonify({"success": True, "record": record_to_json(record, tz)})

    @app.route("/api/admin/attendance/absences", methods=["POST"], endpoint="api_admin_attendance_absences")
    @admin_required
    @json_errors
    def synthesize_absences():
        data = request.get_json(silent=True) or {}
        start = parse_iso_date(str(data.get("start") or ""))
        end = parse_iso_date(str(data.get("end") or ""))
        created = container.attendance_service.synthesize_absences(start, end)
        return jsonify({"success": True, "created": created})
