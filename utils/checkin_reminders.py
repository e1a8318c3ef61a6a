"""
Check-in reminder and end-of-day absence jobs for staff.
"""
import logging
from datetime import timedelta

from models import db
from models.attendance import (
    AttendanceRecord, AttendanceTimes, CheckInReminder, LeaveRequest,
    LEAVE_APPROVED, REMINDER_LATE, REMINDER_UPCOMING,
)
from models.user import User, ROLE_STAFF
from utils.mail import (
    send_absence_admin_alert, send_absence_notice, send_late_checkin_admin_alert,
    send_late_checkin_reminder, send_upcoming_checkin_reminder,
)
from utils.time_utils import at_time_of_day, display, local_now, start_of_day

logger = logging.getLogger(__name__)

DEFAULT_CHECK_IN_TIME = "09:00:00"
UPCOMING_WINDOW = timedelta(minutes=10)


def has_approved_leave(user_id, day):
    """True if an approved leave covers the given date."""
    return LeaveRequest.query.filter(
        LeaveRequest.user_id == user_id,
        LeaveRequest.status == LEAVE_APPROVED,
        LeaveRequest.start_date <= day,
        LeaveRequest.end_date >= day,
    ).first() is not None


def has_checked_in_since(user_id, since):
    return AttendanceRecord.query.filter(
        AttendanceRecord.user_id == user_id,
        AttendanceRecord.check_in_at >= since,
    ).first() is not None


def reminder_sent_since(user_id, kind, since):
    return CheckInReminder.query.filter(
        CheckInReminder.user_id == user_id,
        CheckInReminder.kind == kind,
        CheckInReminder.last_sent >= since,
        CheckInReminder.is_active.is_(True),
    ).first() is not None


def active_staff():
    return User.query.filter(User.role == ROLE_STAFF, User.deleted_at.is_(None)).all()


def _expected_check_in(today):
    times = AttendanceTimes.current()
    if times is None:
        return None
    try:
        return at_time_of_day(today, times.check_in_time or DEFAULT_CHECK_IN_TIME)
    except ValueError:
        logger.error("Invalid check-in time %r, using %s", times.check_in_time, DEFAULT_CHECK_IN_TIME)
        return at_time_of_day(today, DEFAULT_CHECK_IN_TIME)


def _needs_reminder(user, kind, today):
    if has_approved_leave(user.id, today.date()):
        logger.info("User %s has approved leave today, skipping %s reminder", user.name, kind)
        return False
    if has_checked_in_since(user.id, today):
        return False
    if reminder_sent_since(user.id, kind, today):
        logger.info("%s reminder already sent to %s today", kind.capitalize(), user.name)
        return False
    return True


def _record_reminder(user, kind, now, minutes_late=None):
    db.session.add(CheckInReminder(
        user_id=user.id,
        kind=kind,
        last_sent=now,
        minutes_late=minutes_late,
        is_active=True,
    ))
    db.session.commit()


def run_checkin_reminders(now=None):
    """
    Hourly job during the morning. Sends the "upcoming" reminder in the ten
    minutes before expected check-in, and the "late" reminder (with an admin
    alert) once it has passed. Returns the number of reminders sent.
    """
    now = now or local_now()
    today = start_of_day(now)
    expected = _expected_check_in(today)
    if expected is None:
        logger.warning("No attendance times configured, skipping reminder check")
        return 0

    upcoming_from = expected - UPCOMING_WINDOW
    if now < upcoming_from:
        logger.info("Too early for check-in reminders")
        return 0

    kind = REMINDER_UPCOMING if now < expected else REMINDER_LATE
    expected_display = display(expected)
    sent = 0

    for user in active_staff():
        try:
            if not _needs_reminder(user, kind, today):
                continue
            if kind == REMINDER_UPCOMING:
                send_upcoming_checkin_reminder(user, expected_display)
                _record_reminder(user, kind, now)
            else:
                minutes_late = int((now - expected).total_seconds() // 60)
                send_late_checkin_reminder(user, expected_display, display(now), minutes_late)
                send_late_checkin_admin_alert(user, expected_display, display(now), minutes_late)
                _record_reminder(user, kind, now, minutes_late)
            sent += 1
            logger.info("Sent %s check-in reminder to %s", kind, user.name)
        except Exception as e:
            db.session.rollback()
            logger.error("Error sending %s reminder to user %s: %s", kind, user.name, e)

    logger.info("Check-in reminder check completed, %s sent", sent)
    return sent


def run_end_of_day_absence(now=None):
    """
    Evening job: staff with no check-in today and no approved leave are told
    they were marked absent, and the admin is notified. Returns the count.
    """
    now = now or local_now()
    today = start_of_day(now)
    day_display = today.strftime('%a %b %d %Y')
    notified = 0

    for user in active_staff():
        try:
            if has_approved_leave(user.id, today.date()):
                continue
            if has_checked_in_since(user.id, today):
                continue
            logger.info("User %s has no attendance record and no approved leave - marking as absent",
                        user.name)
            send_absence_notice(user, day_display)
            send_absence_admin_alert(user, day_display)
            notified += 1
        except Exception as e:
            logger.error("Error processing end-of-day check for user %s: %s", user.name, e)

    logger.info("End-of-day attendance check completed, %s absent", notified)
    return notified
