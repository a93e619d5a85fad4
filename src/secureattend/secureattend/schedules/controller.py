from __future__ import annotations

import logging
from datetime import datetime
from functools import wraps

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_in_zone
from ..container import Container
from ..core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
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
            except Exception:
                logger.exception("Unhandled error in %s", request.path)
                return jsonify({"success": False, "error": "Internal server error"}), 500

        return wrapper

    @app.route("/api/schedules/today", methods=["GET"], endpoint="api_schedules_today")
    @json_errors
    def schedules_today():
        date_s = request.args.get("date")
        try:
            work_date = datetime.strptime(date_s, "%Y-%m-%d").date() if date_s else now_in_zone(tz).date()
        except ValueError as e:
            raise ValidationError("date must be YYYY-MM-DD") from e

        scheduled = container.schedule_service.scheduled_on(work_date)
        items = []
        for employee_id in sorted(scheduled):
            sc = scheduled[employee_id]
            window = sc.shift.window_for(work_date, tz)
            items.append(
                {
                    "employee_id": employee_id,
                    "schedule_id": sc.schedule_id,
                    "shift": sc.shift.label(),
                    "department": sc.department,
                    "start": window.start.isoformat(),
                    "end": window.end.isoformat(),
                    "overnight": sc.shift.is_overnight,
                }
            )
        return jsonify({"date": work_date.strftime("%Y-%m-%d"), "schedules": items}), 200
