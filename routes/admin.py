"""
Admin routes: user listing, attendance times and leave decisions
"""
import math
from datetime import datetime

from flask import Blueprint, request, jsonify, current_app

from models import db
from models.attendance import AttendanceTimes, LeaveRequest, LEAVE_APPROVED, LEAVE_PENDING, LEAVE_REJECTED
from models.user import User
from utils.auth_utils import admin_required
from utils.errors import InvalidInput, NotFound
from utils.validators import parse_pagination, text_field, validate_time_of_day

admin_bp = Blueprint('admin', __name__, url_prefix='/api/admin')


@admin_bp.route('/users', methods=['GET'])
@admin_required
def list_users():
    """Paginated user list, newest first"""
    page, limit = parse_pagination(request.args)
    total = User.query.count()
    users = (User.query.order_by(User.created_at.desc(), User.id.desc())
             .offset((page - 1) * limit).limit(limit).all())
    return jsonify({
        "success": True,
        "message": "Users fetched successfully",
        "data": [u.to_admin_dict() for u in users],
        "meta": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit),
        },
    })


@admin_bp.route('/attendance-times', methods=['GET'])
@admin_required
def get_attendance_times():
    times = AttendanceTimes.current()
    if not times:
        raise NotFound("Attendance times are not configured")
    return jsonify({"success": True, "data": times.to_dict()})


@admin_bp.route('/attendance-times', methods=['PUT'])
@admin_required
def update_attendance_times():
    data = request.get_json(silent=True) or {}
    check_in = data.get('checkInTime')
    check_out = data.get('checkOutTime')
    if check_in is None and check_out is None:
        raise InvalidInput("Provide checkInTime and/or checkOutTime")
    for label, value in (('checkInTime', check_in), ('checkOutTime', check_out)):
        if value is not None and not validate_time_of_day(value):
            raise InvalidInput(f"{label} must be HH:MM or HH:MM:SS")

    times = AttendanceTimes.current()
    if not times:
        times = AttendanceTimes(id=1)
        db.session.add(times)
    if check_in is not None:
        times.check_in_time = check_in.strip()
    if check_out is not None:
        times.check_out_time = check_out.strip()
    db.session.commit()
    current_app.logger.info(f"Attendance times updated: {times.check_in_time} - {times.check_out_time}")
    return jsonify({"success": True, "message": "Attendance times updated", "data": times.to_dict()})


@admin_bp.route('/leave', methods=['GET'])
@admin_required
def list_leave():
    status = request.args.get('status')
    query = LeaveRequest.query
    if status:
        if status not in (LEAVE_PENDING, LEAVE_APPROVED, LEAVE_REJECTED):
            raise InvalidInput("Invalid status filter")
        query = query.filter_by(status=status)
    leaves = query.order_by(LeaveRequest.created_at.desc()).all()
    return jsonify({"success": True, "data": [item.to_dict() for item in leaves]})


def _decide(leave_id, status, reason=None):
    leave = db.session.get(LeaveRequest, leave_id)
    if not leave:
        raise NotFound("Leave request not found")
    if leave.status != LEAVE_PENDING:
        raise InvalidInput(f"Leave request is already {leave.status}")
    leave.status = status
    leave.rejection_reason = reason
    leave.decided_at = datetime.utcnow()
    db.session.commit()
    return leave


@admin_bp.route('/leave/<int:leave_id>/approve', methods=['PUT'])
@admin_required
def approve_leave(leave_id):
    leave = _decide(leave_id, LEAVE_APPROVED)
    return jsonify({"success": True, "message": "Leave approved", "data": leave.to_dict()})


@admin_bp.route('/leave/<int:leave_id>/reject', methods=['PUT'])
@admin_required
def reject_leave(leave_id):
    data = request.get_json(silent=True) or {}
    reason = text_field(data, 'reason')
    if not reason:
        raise InvalidInput("Please provide a reason for rejection")
    leave = _decide(leave_id, LEAVE_REJECTED, reason)
    return jsonify({"success": True, "message": "Leave rejected", "data": leave.to_dict()})
