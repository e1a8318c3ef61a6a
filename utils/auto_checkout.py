"""
Nightly auto-checkout of attendance records left open.

A record is closed on the calendar date of its check-in: at the end of the
user's last break that day, or at the configured end-of-day time when there
were no breaks.
"""
import logging
import time as time_module
from datetime import timedelta

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.attendance import AttendanceRecord, AttendanceTimes, BreakRecord, STATUS_AUTO_CHECKOUT, STATUS_CHECKED_IN
from utils.time_utils import at_time_of_day, end_of_day, local_now, start_of_day

logger = logging.getLogger(__name__)

FALLBACK_END_TIME = "17:00:00"


def end_of_workday(check_in_at, default_end_time):
    """Configured end time on the check-in date; 17:00:00 if it does not parse."""
    try:
        return at_time_of_day(check_in_at, default_end_time)
    except (ValueError, TypeError) as e:
        logger.error("Error parsing end time %r: %s; using %s", default_end_time, e, FALLBACK_END_TIME)
        return at_time_of_day(check_in_at, FALLBACK_END_TIME)


def compute_checkout_time(check_in_at, breaks, default_end_time):
    """
    Pick the checkout for an open record.

    `breaks` are that user's breaks on the check-in date, ordered by start.
    """
    if not breaks:
        return end_of_workday(check_in_at, default_end_time)

    last_break = breaks[-1]
    checkout = last_break.break_end or last_break.break_start
    if checkout < check_in_at or checkout.date() != check_in_at.date():
        logger.info("Checkout %s is outside the check-in day %s; using end of workday",
                    checkout, check_in_at.date())
        checkout = end_of_workday(check_in_at, default_end_time)
    return checkout


def breaks_on_checkin_date(record):
    return (BreakRecord.query
            .filter(BreakRecord.user_id == record.user_id,
                    BreakRecord.break_start >= start_of_day(record.check_in_at),
                    BreakRecord.break_start <= end_of_day(record.check_in_at))
            .order_by(BreakRecord.break_start.asc())
            .all())


def close_record(record, checkout):
    """Write the checkout if the record is still open; fall back to a plain update by id."""
    try:
        updated = AttendanceRecord.query.filter(
            AttendanceRecord.id == record.id,
            AttendanceRecord.check_out_at.is_(None),
        ).update({
            AttendanceRecord.check_out_at: checkout,
            AttendanceRecord.status: STATUS_AUTO_CHECKOUT,
        }, synchronize_session=False)
        db.session.commit()
        logger.info("Auto checkout for user %s at %s (%s row)", record.user_id, checkout, updated)
        return updated > 0
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Conditional checkout update failed for record %s: %s", record.id, e)

    try:
        existing = db.session.get(AttendanceRecord, record.id)
        if existing is None or existing.check_out_at is not None:
            logger.warning("No open attendance record %s to update", record.id)
            return False
        existing.check_out_at = checkout
        existing.status = STATUS_AUTO_CHECKOUT
        db.session.commit()
        return True
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Failed to update attendance record %s by id as well: %s", record.id, e)
        return False


def cleanup_invalid_checkouts():
    """Null out checkouts on another date more than one day away from check-in."""
    cleaned = 0
    closed = AttendanceRecord.query.filter(AttendanceRecord.check_out_at.isnot(None)).all()
    for record in closed:
        try:
            gap_days = abs((record.check_out_at - record.check_in_at).total_seconds()) / 86400
            if record.check_in_at.date() != record.check_out_at.date() and gap_days > 1:
                logger.info("Resetting attendance %s: check-in %s, checkout %s (%.1f days apart)",
                            record.id, record.check_in_at.date(), record.check_out_at.date(), gap_days)
                record.check_out_at = None
                record.status = STATUS_CHECKED_IN
                db.session.commit()
                cleaned += 1
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error("Error cleaning up attendance record %s: %s", record.id, e)
    return cleaned


def run_auto_checkout(now=None):
    """
    Scheduled entry point. Closes records open for at least 24 hours, then
    runs the cleanup pass. Returns a summary dict.
    """
    now = now or local_now()
    summary = {'open': 0, 'processed': 0, 'cleaned': 0}
    logger.info("Auto-checkout started at %s", now)

    times = AttendanceTimes.current()
    if times is None:
        logger.warning("No attendance times configuration found, skipping auto-checkout")
        return summary

    default_end_time = times.check_out_time
    if not default_end_time or not isinstance(default_end_time, str):
        logger.warning("Missing default checkout time, using %s", FALLBACK_END_TIME)
        default_end_time = FALLBACK_END_TIME

    open_records = (AttendanceRecord.query
                    .filter(AttendanceRecord.check_out_at.is_(None),
                            AttendanceRecord.check_in_at < now - timedelta(hours=24))
                    .order_by(AttendanceRecord.check_in_at.desc())
                    .all())
    summary['open'] = len(open_records)
    delay = current_app.config.get('SCHEDULER_ITEM_DELAY', 0)

    for record in open_records:
        try:
            checkout = compute_checkout_time(record.check_in_at, breaks_on_checkin_date(record),
                                             default_end_time)
            if close_record(record, checkout):
                summary['processed'] += 1
        except Exception as e:
            db.session.rollback()
            logger.error("Error processing attendance %s for user %s: %s", record.id, record.user_id, e,
                         exc_info=True)
        if delay:
            time_module.sleep(delay)

    summary['cleaned'] = cleanup_invalid_checkouts()
    logger.info("Auto-checkout completed. Processed %s/%s records, cleaned %s invalid records.",
                summary['processed'], summary['open'], summary['cleaned'])
    return summary
