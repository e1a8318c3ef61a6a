"""
Staff attendance routes: check-in/out, breaks, history and leave requests
"""
import math

from flask import Blueprint, request, jsonify, current_app
from flask_login import current_user

from models import db
from models.attendance import (
    AttendanceRecord, BreakRecord, LeaveRequest,
    STATUS_CHECKED_IN, STATUS_CHECKED_OUT,
)
from utils.auth_utils import staff_required
from utils.errors import InvalidInput, NotFound
from utils.signature import signature_guard
from utils.time_utils import local_now, start_of_day
from utils.validators import parse_date, parse_pagination, text_field

staff_bp = Blueprint('staff', __name__, url_prefix='/api/staff')
staff_bp.before_request(signature_guard)


def _open_record(user_id):
    return (AttendanceRecord.query
            .filter(AttendanceRecord.user_id == user_id, AttendanceRecord.check_out_at.is_(None))
            .order_by(AttendanceRecord.check_in_at.desc())
            .first())


def _running_break(user_id):
    return (BreakRecord.query
            .filter(BreakRecord.user_id == user_id, BreakRecord.break_end.is_(None))
            .order_by(BreakRecord.break_start.desc())
            .first())


@staff_bp.route('/me', methods=['GET'])
@staff_required
def me():
    return jsonify({"success": True, "message": "Staff profile", "data": current_user.to_public_dict()})


@staff_bp.route('/checkin', methods=['POST'])
@staff_required
def check_in():
    if _open_record(current_user.id):
        raise InvalidInput("You are already checked in. Please check out first.")

    record = AttendanceRecord(user_id=current_user.id, check_in_at=local_now(), status=STATUS_CHECKED_IN)
    db.session.add(record)
    db.session.commit()
    current_app.logger.info(f"Staff {current_user.id} checked in")
    return jsonify({"success": True, "message": "Checked in successfully", "data": record.to_dict()}), 201


@staff_bp.route('/checkout', methods=['POST'])
@staff_required
def check_out():
    record = _open_record(current_user.id)
    if not record:
        raise NotFound("No open check-in found for today")

    now = local_now()
    running = _running_break(current_user.id)
    if running:
        running.break_end = now
    record.check_out_at = now
    record.status = STATUS_CHECKED_OUT
    db.session.commit()
    current_app.logger.info(f"Staff {current_user.id} checked out")
    return jsonify({"success": True, "message": "Checked out successfully", "data": record.to_dict()})


@staff_bp.route('/break/start', methods=['POST'])
@staff_required
def start_break():
    if not _open_record(current_user.id):
        raise InvalidInput("Please check in before starting a break")
    if _running_break(current_user.id):
        raise InvalidInput("A break is already in progress")

    item = BreakRecord(user_id=current_user.id, break_start=local_now())
    db.session.add(item)
    db.session.commit()
    return jsonify({"success": True, "message": "Break started", "data": item.to_dict()}), 201


@staff_bp.route('/break/end', methods=['POST'])
@staff_required
def end_break():
    item = _running_break(current_user.id)
    if not item:
        raise NotFound("No break in progress")

    item.break_end = local_now()
    db.session.commit()
    return jsonify({"success": True, "message": "Break ended", "data": item.to_dict()})


@staff_bp.route('/attendance/today', methods=['GET'])
@staff_required
def today_attendance():
    today = start_of_day(local_now())
    records = (AttendanceRecord.query
               .filter(AttendanceRecord.user_id == current_user.id, AttendanceRecord.check_in_at >= today)
               .order_by(AttendanceRecord.check_in_at.asc())
               .all())
    breaks = (BreakRecord.query
              .filter(BreakRecord.user_id == current_user.id, BreakRecord.break_start >= today)
              .order_by(BreakRecord.break_start.asc())
              .all())
    return jsonify({
        "success": True,
        "data": {
            "checkedIn": any(r.is_open for r in records),
            "attendance": [r.to_dict() for r in records],
            "breaks": [b.to_dict() for b in breaks],
        },
    })


@staff_bp.route('/history', methods=['GET'])
@staff_required
def history():
    page, limit = parse_pagination(request.args)
    query = AttendanceRecord.query.filter_by(user_id=current_user.id)
    total = query.count()
    records = (query.order_by(AttendanceRecord.check_in_at.desc())
               .offset((page - 1) * limit).limit(limit).all())
    return jsonify({
        "success": True,
        "data": [r.to_dict() for r in records],
        "meta": {"total": total, "page": page, "limit": limit, "pages": math.ceil(total / limit)},
    })


@staff_bp.route('/leave', methods=['POST'])
@staff_required
def request_leave():
    data = request.get_json(silent=True) or {}
    start = parse_date(data.get('startDate'))
    end = parse_date(data.get('endDate'))
    if not start or not end:
        raise InvalidInput("startDate and endDate are required (YYYY-MM-DD)")
    if end < start:
        raise InvalidInput("endDate cannot be before startDate")

    leave = LeaveRequest(user_id=current_user.id, start_date=start, end_date=end,
                         reason=text_field(data, 'reason') or None)
    db.session.add(leave)
    db.session.commit()
    return jsonify({"success": True, "message": "Leave request submitted", "data": leave.to_dict()}), 201


@staff_bp.route('/leave', methods=['GET'])
@staff_required
def my_leave():
    leaves = (LeaveRequest.query.filter_by(user_id=current_user.id)
              .order_by(LeaveRequest.created_at.desc()).all())
    return jsonify({"success": True, "data": [item.to_dict() for item in leaves]})
