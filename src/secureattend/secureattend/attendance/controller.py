from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, parse_timestamp
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import record_to_dict

logger = logging.getLogger(__name__)


def register(app: Flask, container) -> None:
    tz = container.resolver_config.tz

    def json_errors(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except ValidationError as e:
                return jsonify({"success": False, "error": str(e)}), 400
            except NotFoundError as e:
                return jsonify({"success": False, "error": str(e)}), 404
            except ConflictError as e:
                return jsonify({"success": False, "error": str(e)}), 409
            except Exception:
                logger.exception("Unhandled error in %s", request.path)
                return jsonify({"success": False, "error": "Internal server error"}), 500

        return wrapper

    def _date_arg(value: Optional[str]) -> Optional[date]:
        if not value:
            return None
        try:
            return parse_iso_date(value)
        except ValueError as e:
            raise ValidationError("date must be YYYY-MM-DD") from e

    def _timestamp(data: dict, key: str):
        value = data.get(key)
        if value in (None, ""):
            return None
        try:
            return parse_timestamp(str(value), tz)
        except ValueError as e:
            raise ValidationError(f"Invalid {key} date format") from e

    def _payload() -> dict:
        return request.get_json(silent=True) or {}

    @app.route("/api/attendance", methods=["POST"], endpoint="api_record_attendance")
    @json_errors
    def record_attendance():
        data = _payload()
        employee_id = str(data.get("employee_id") or "").strip()
        if not employee_id:
            raise ValidationError("employee_id is required")

        clock_out = _timestamp(data, "clock_out")
        if clock_out is not None:
            record = container.clock_event_service.record_clock_out(employee_id, clock_out)
            return jsonify({"message": "Clock-out recorded successfully", "attendance": record_to_dict(record)}), 200

        record = container.clock_event_service.record_clock_in(employee_id, _timestamp(data, "clock_in"))
        return jsonify({"message": "Clock-in recorded successfully", "attendance": record_to_dict(record)}), 201

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance_history")
    @json_errors
    def attendance_history():
        args = request.args
        items = container.attendance_service.history(
            employee_id=(args.get("employee_id") or "").strip() or None,
            work_date=_date_arg(args.get("date")),
            start_date=_date_arg(args.get("start_date")),
            end_date=_date_arg(args.get("end_date")),
        )
        return jsonify(items), 200

    @app.route("/api/attendance/sync", methods=["POST"], endpoint="api_attendance_sync")
    @json_errors
    def attendance_sync():
        records = _payload().get("records")
        if not isinstance(records, list):
            raise ValidationError("records array is required")
        logger.info("Biometric sync request: %d records", len(records))
        result = container.clock_event_service.sync(records)
        return jsonify(result.to_dict()), 200

    @app.route("/api/attendance/today", methods=["GET"], endpoint="api_attendance_today")
    @json_errors
    def attendance_today():
        rows = container.attendance_service.day_view(_date_arg(request.args.get("date")))
        return jsonify([r.to_dict() for r in rows]), 200

    @app.route("/api/attendance/<employee_id>/status", methods=["GET"], endpoint="api_attendance_status")
    @json_errors
    def attendance_status(employee_id: str):
        res = container.attendance_service.resolve_for(employee_id, _date_arg(request.args.get("date")))
        return jsonify(
            {
                "employee_id": res.employee_id,
                "date": res.target_date.strftime("%Y-%m-%d"),
                "scheduled": res.scheduled,
                "state": res.state.value,
                "status": res.status.value if res.status else None,
                "shift": res.schedule.shift.label() if res.schedule else None,
                "hours": res.hours,
            }
        ), 200

    @app.route("/api/absent-marking/run-now", methods=["POST"], endpoint="api_absent_marking_run")
    @json_errors
    def absent_marking_run():
        target_date = _date_arg(_payload().get("date") or request.args.get("date"))
        logger.info("Manual absent marking and missed clock-out run triggered via API")
        results = container.sweep_job.run_now(target_date)
        return jsonify(
            {
                "message": "Absent marking and missed clock-out processing completed",
                "markedAbsent": sum(r.marked_absent for r in results),
                "markedMissedClockOut": sum(r.marked_missed_clockout for r in results),
                "totalProcessed": sum(r.total_processed for r in results),
                "results": [r.to_dict() for r in results],
            }
        ), 200

    @app.route("/api/absent-marking/start", methods=["POST"], endpoint="api_absent_marking_start")
    @json_errors
    def absent_marking_start():
        started = container.sweep_job.start()
        message = "Absent marking and missed clock-out service started" if started else "Service is already running"
        return jsonify({"message": message, "status": container.sweep_job.status()}), 200

    @app.route("/api/absent-marking/stop", methods=["POST"], endpoint="api_absent_marking_stop")
    @json_errors
    def absent_marking_stop():
        stopped = container.sweep_job.stop()
        message = "Absent marking and missed clock-out service stopped" if stopped else "Service is not running"
        return jsonify({"message": message, "status": container.sweep_job.status()}), 200

    @app.route("/api/absent-marking/status", methods=["GET"], endpoint="api_absent_marking_status")
    @json_errors
    def absent_marking_status():
        return jsonify(container.sweep_job.status()), 200

    @app.route("/api/overtime/eligible", methods=["GET"], endpoint="api_overtime_eligible")
    @json_errors
    def overtime_eligible():
        employees = container.overtime_service.list_eligible(_date_arg(request.args.get("date")))
        return jsonify(
            [
                {
                    "employee_id": e.employee_id,
                    "firstname": e.firstname,
                    "lastname": e.lastname,
                    "department": e.department,
                    "position": e.position,
                }
                for e in employees
            ]
        ), 200

    @app.route("/api/overtime/assign", methods=["POST"], endpoint="api_overtime_assign")
    @json_errors
    def overtime_assign():
        data = _payload()
        employee_ids = data.get("employee_ids")
        if not isinstance(employee_ids, list):
            employee_ids = [data["employee_id"]] if data.get("employee_id") else []

        batch = container.overtime_service.assign(
            employee_ids,
            data.get("overtime_hours", data.get("estimated_hours")),
            data.get("reason") or "",
            _date_arg(data.get("date") or data.get("assigned_date")),
        )
        return jsonify(batch.to_dict()), 200

    @app.route("/api/overtime/hours", methods=["PUT"], endpoint="api_overtime_hours")
    @json_errors
    def overtime_hours():
        data = _payload()
        if not data.get("attendance_id") or data.get("overtime_hours") is None:
            raise ValidationError("attendance_id and overtime_hours are required")
        updated = container.overtime_service.update_hours(data["attendance_id"], data["overtime_hours"])
        return jsonify({"message": "Overtime hours updated successfully", "attendance": updated}), 200

    @app.route("/api/overtime/<employee_id>", methods=["DELETE"], endpoint="api_overtime_remove")
    @json_errors
    def overtime_remove(employee_id: str):
        record = container.overtime_service.remove(employee_id, _date_arg(request.args.get("date")))
        return jsonify({"message": "Overtime assignment removed successfully", "attendance": record_to_dict(record)}), 200

    @app.route("/api/overtime/assignments", methods=["GET"], endpoint="api_overtime_assignments")
    @json_errors
    def overtime_assignments():
        return jsonify(container.overtime_service.list_assignments(_date_arg(request.args.get("date")))), 200
