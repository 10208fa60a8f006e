from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.web import admin_required, body_date, current_employee_id, date_arg, json_errors, login_required
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _period_from_args() -> tuple[date, date]:
        start, end = date_arg("start"), date_arg("end")
        if start is None or end is None:
            raise ValidationError("start and end are required (YYYY-MM-DD)")
        return start, end

    @app.route(
        "/api/admin/payroll/compute/<int:employee_id>", methods=["GET"], endpoint="api_admin_payroll_compute"
    )
    @admin_required
    @json_errors
    def compute(employee_id: int):
        start, end = _period_from_args()
        computation = container.payroll_service.compute_payroll(employee_id, start, end)
        return jsonify({"success": True, "result": computation.as_dict()})

    @app.route("/api/admin/payroll/recalculate", methods=["POST"], endpoint="api_admin_payroll_recalculate")
    @admin_required
    @json_errors
    def recalculate():
        data = request.get_json(silent=True) or {}
        start = body_date(data, "payPeriodStart")
        end = body_date(data, "payPeriodEnd")
        user_id = data.get("userId")
        employee_ids = [int(user_id)] if user_id not in (None, "") else None

        summary = container.payroll_service.generate_for_period(start, end, employee_ids=employee_ids)
        return jsonify({"success": summary.failed == 0, "summary": summary.as_dict()})

    @app.route("/api/employee/payroll", methods=["GET"], endpoint="api_employee_payroll")
    @login_required
    @json_errors
    def my_payroll():
        results = container.payroll_service.results_for_employee(
            current_employee_id(), start=date_arg("start"), end=date_arg("end")
        )
        return jsonify({"success": True, "results": [r.as_dict() for r in results]})
