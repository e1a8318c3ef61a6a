"""
Attendance, break, leave and reminder models
"""
from models import db
from datetime import datetime

STATUS_CHECKED_IN = 'checked_in'
STATUS_CHECKED_OUT = 'checked_out'
STATUS_AUTO_CHECKOUT = 'auto_checkout'

LEAVE_PENDING = 'pending'
LEAVE_APPROVED = 'approved'
LEAVE_REJECTED = 'rejected'

REMINDER_UPCOMING = 'upcoming'
REMINDER_LATE = 'late'


def _iso(value):
    return value.isoformat() if value else None


class AttendanceRecord(db.Model):
    """One row per check-in; open while check_out_at is null"""
    __tablename__ = 'attendance'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    check_in_at = db.Column(db.DateTime, nullable=False, index=True)
    check_out_at = db.Column(db.DateTime, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=STATUS_CHECKED_IN)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship('User', backref=db.backref('attendance_records', lazy=True))

    @property
    def is_open(self):
        return self.check_out_at is None

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'checkInAt': _iso(self.check_in_at),
            'checkOutAt': _iso(self.check_out_at),
            'status': self.status,
        }

    def __repr__(self):
        return f'<AttendanceRecord {self.id} user={self.user_id}>'


class BreakRecord(db.Model):
    __tablename__ = 'breaks'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    break_start = db.Column(db.DateTime, nullable=False)
    break_end = db.Column(db.DateTime, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'breakStart': _iso(self.break_start),
            'breakEnd': _iso(self.break_end),
        }


class AttendanceTimes(db.Model):
    """Single configuration row (id=1) with expected check-in/out times as HH:MM[:SS]"""
    __tablename__ = 'attendance_times'

    id = db.Column(db.Integer, primary_key=True)
    check_in_time = db.Column(db.String(8), nullable=False, default='09:00:00')
    check_out_time = db.Column(db.String(8), nullable=False, default='17:00:00')
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @classmethod
    def current(cls):
        return db.session.get(cls, 1)

    def to_dict(self):
        return {
            'checkInTime': self.check_in_time,
            'checkOutTime': self.check_out_time,
        }


class LeaveRequest(db.Model):
    __tablename__ = 'leave_requests'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    reason = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default=LEAVE_PENDING)
    rejection_reason = db.Column(db.Text, nullable=True)
    decided_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship('User', backref=db.backref('leave_requests', lazy=True))

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'userName': self.user.name if self.user else None,
            'startDate': self.start_date.isoformat(),
            'endDate': self.end_date.isoformat(),
            'reason': self.reason,
            'status': self.status,
            'rejectionReason': self.rejection_reason,
            'decidedAt': _iso(self.decided_at),
            'createdAt': _iso(self.created_at),
        }


class CheckInReminder(db.Model):
    """Last reminder of a given kind sent to a user; one per kind per day"""
    __tablename__ = 'check_in_reminders'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    kind = db.Column(db.String(20), nullable=False, default=REMINDER_LATE)
    last_sent = db.Column(db.DateTime, nullable=False)
    minutes_late = db.Column(db.Integer, nullable=True)
    is_active = db.Column(db.Boolean, default=True)
