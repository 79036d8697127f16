from __future__ import annotations

from functools import wraps
from typing import Any

from flask import Flask, g, request, session

from ..common.datetime_utils import now_utc
from ..common.http import fail, handle_errors, ok
from ..common.validators import optional_positive_int, parse_positive_int
from ..core.constants import SESSION_USER_KEY
from ..core.exceptions import AuthenticationError, AuthorizationError, DomainError, ValidationError
from ..container import Container
from ..users.model import UserSummary
from ..users.repository import UserDirectory
from .model import UNSET, AttendanceFilter, AttendanceUpdate


def _json_body() -> dict[str, Any]:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def _clock_value(body: dict[str, Any], key: str) -> Any:
    """Read clockIn/clockOut: absent -> UNSET, true or "now" -> current UTC time."""
    if key not in body:
        return UNSET
    value = body[key]
    if value is True or (isinstance(value, str) and value.strip().lower() == "now"):
        return now_utc()
    if value is False:
        raise ValidationError(f"Invalid {key}")
    return value


def _session_user(users: UserDirectory) -> UserSummary:
    """Re-resolve the session's user on every request so deactivation takes effect at once."""
    raw_id = session.get(SESSION_USER_KEY)
    if raw_id is None:
        raise AuthenticationError("Authentication required.")
    try:
        user = users.find_user(int(raw_id))
    except (TypeError, ValueError):
        user = None
    if not user:
        session.clear()
        raise AuthenticationError("User not found. Please login again.")
    if not user.is_active:
        raise AuthorizationError("Account is inactive or has been deleted.")
    return user


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                g.current_user = _session_user(container.users_repo)
            except DomainError as e:
                app.logger.info("Rejected %s %s: %s", request.method, request.path, e.message)
                return fail(e.message, e.status_code)
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        @login_required
        def wrapper(*args, **kwargs):
            if not g.current_user.is_admin:
                return fail("Access denied. Admin privileges required.", 403)
            return view(*args, **kwargs)

        return wrapper

    def owner_or_admin_required(view):
        """Allow admins, or a user reading their own attendance."""

        @wraps(view)
        @login_required
        def wrapper(*args, **kwargs):
            try:
                target_id = parse_positive_int(kwargs.get("user_id"), "user ID")
            except ValidationError as e:
                return fail(e.message, e.status_code)

            if not g.current_user.is_admin and g.current_user.user_id != target_id:
                return fail("Access denied. You can only access your own resources.", 403)
            return view(*args, **kwargs)

        return wrapper

    @app.route("/attendances", methods=["GET"], endpoint="attendances_list")
    @admin_required
    @handle_errors("Failed to fetch attendances")
    def list_attendances():
        filters = AttendanceFilter(
            user_id=optional_positive_int(request.args.get("userId"), "user ID"),
            start_date=request.args.get("startDate") or None,
            end_date=request.args.get("endDate") or None,
            status=request.args.get("status") or None,
        )
        return ok(service.list_attendances(filters))

    @app.route("/attendances", methods=["POST"], endpoint="attendances_create")
    @login_required
    @handle_errors("Failed to mark attendance")
    def create_attendance():
        body = _json_body()
        clock_in = _clock_value(body, "clockIn")
        clock_out = _clock_value(body, "clockOut")

        record = service.mark_attendance(
            user_id=optional_positive_int(body.get("userId"), "user ID"),
            work_date=body.get("date"),
            status=body.get("status"),
            clock_in=None if clock_in is UNSET else clock_in,
            clock_out=None if clock_out is UNSET else clock_out,
            marked_by=g.current_user.user_id,
        )
        return ok(record, message="Attendance marked successfully", status=201)

    @app.route("/attendances/user/<user_id>", methods=["GET"], endpoint="attendances_for_user")
    @owner_or_admin_required
    @handle_errors("Failed to fetch user attendances")
    def list_user_attendances(user_id: str):
        rows = service.list_for_user(
            parse_positive_int(user_id, "user ID"),
            start_date=request.args.get("startDate") or None,
            end_date=request.args.get("endDate") or None,
        )
        return ok(rows)

    @app.route("/attendances/user/<user_id>/stats", methods=["GET"], endpoint="attendances_stats")
    @owner_or_admin_required
    @handle_errors("Failed to fetch attendance statistics")
    def attendance_stats(user_id: str):
        stats = service.get_stats(
            parse_positive_int(user_id, "user ID"),
            start_date=request.args.get("startDate") or None,
            end_date=request.args.get("endDate") or None,
        )
        return ok(stats)

    @app.route("/attendances/<attendance_id>", methods=["GET"], endpoint="attendances_detail")
    @login_required
    @handle_errors("Failed to fetch attendance")
    def get_attendance(attendance_id: str):
        return ok(service.get_by_id(parse_positive_int(attendance_id, "attendance ID")))

    @app.route("/attendances/<attendance_id>", methods=["PATCH", "PUT"], endpoint="attendances_update")
    @admin_required
    @handle_errors("Failed to update attendance")
    def update_attendance(attendance_id: str):
        record_id = parse_positive_int(attendance_id, "attendance ID")
        body = _json_body()

        changes = AttendanceUpdate(
            status=body["status"] if "status" in body else UNSET,
            work_date=body["date"] if "date" in body else UNSET,
            clock_in=_clock_value(body, "clockIn"),
            clock_out=_clock_value(body, "clockOut"),
        )
        record = service.update_attendance(record_id, changes)
        return ok(record, message="Attendance updated successfully")

    @app.route("/attendances/<attendance_id>", methods=["DELETE"], endpoint="attendances_delete")
    @admin_required
    @handle_errors("Failed to delete attendance")
    def delete_attendance(attendance_id: str):
        service.delete_attendance(parse_positive_int(attendance_id, "attendance ID"))
        return ok(message="Attendance deleted successfully")
