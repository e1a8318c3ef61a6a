from datetime import datetime

from models import db
from models.attendance import AttendanceRecord, AttendanceTimes, BreakRecord, STATUS_AUTO_CHECKOUT
from utils.auto_checkout import cleanup_invalid_checkouts, compute_checkout_time, run_auto_checkout

CHECK_IN = datetime(2026, 10, 19, 9, 5)
NOW = datetime(2026, 10, 21, 23, 59)


def test_checkout_without_breaks_uses_end_of_workday():
    assert compute_checkout_time(CHECK_IN, [], '18:30') == datetime(2026, 10, 19, 18, 30)


def test_checkout_uses_last_break_end():
    breaks = [
        BreakRecord(break_start=datetime(2026, 10, 19, 11, 0), break_end=datetime(2026, 10, 19, 11, 15)),
        BreakRecord(break_start=datetime(2026, 10, 19, 13, 0), break_end=datetime(2026, 10, 19, 13, 40)),
    ]
    assert compute_checkout_time(CHECK_IN, breaks, '17:00:00') == datetime(2026, 10, 19, 13, 40)


def test_checkout_uses_start_of_unfinished_break():
    breaks = [BreakRecord(break_start=datetime(2026, 10, 19, 15, 0), break_end=None)]
    assert compute_checkout_time(CHECK_IN, breaks, '17:00:00') == datetime(2026, 10, 19, 15, 0)


def test_checkout_ignores_breaks_outside_the_check_in_day():
    before = [BreakRecord(break_start=datetime(2026, 10, 19, 8, 0), break_end=datetime(2026, 10, 19, 8, 30))]
    assert compute_checkout_time(CHECK_IN, before, '17:00:00') == datetime(2026, 10, 19, 17, 0)

    next_day = [BreakRecord(break_start=datetime(2026, 10, 19, 23, 50), break_end=datetime(2026, 10, 20, 0, 20))]
    assert compute_checkout_time(CHECK_IN, next_day, '17:00:00') == datetime(2026, 10, 19, 17, 0)


def test_bad_end_time_falls_back_to_five_pm():
    assert compute_checkout_time(CHECK_IN, [], 'late') == datetime(2026, 10, 19, 17, 0)


def _record(user_id, check_in, check_out=None, status='checked_in'):
    record = AttendanceRecord(user_id=user_id, check_in_at=check_in, check_out_at=check_out, status=status)
    db.session.add(record)
    db.session.commit()
    return record.id


def test_run_closes_stale_records_only(app, make_user):
    staff_id = make_user(email='staff@test.local', role='staff')
    with app.app_context():
        stale_id = _record(staff_id, CHECK_IN)
        db.session.add(BreakRecord(user_id=staff_id, break_start=datetime(2026, 10, 19, 13, 0),
                                   break_end=datetime(2026, 10, 19, 13, 30)))
        db.session.commit()
        fresh_id = _record(staff_id, datetime(2026, 10, 21, 9, 0))

        summary = run_auto_checkout(now=NOW)

        assert summary == {'open': 1, 'processed': 1, 'cleaned': 0}
        stale = db.session.get(AttendanceRecord, stale_id)
        assert stale.check_out_at == datetime(2026, 10, 19, 13, 30)
        assert stale.status == STATUS_AUTO_CHECKOUT
        assert db.session.get(AttendanceRecord, fresh_id).check_out_at is None


def test_run_uses_configured_checkout_time(app, make_user):
    staff_id = make_user(email='staff@test.local', role='staff')
    with app.app_context():
        AttendanceTimes.current().check_out_time = '18:00:00'
        db.session.commit()
        record_id = _record(staff_id, CHECK_IN)

        run_auto_checkout(now=NOW)

        assert db.session.get(AttendanceRecord, record_id).check_out_at == datetime(2026, 10, 19, 18, 0)


def test_run_skips_without_attendance_times(app, make_user):
    staff_id = make_user(email='staff@test.local', role='staff')
    with app.app_context():
        AttendanceTimes.query.delete()
        db.session.commit()
        record_id = _record(staff_id, CHECK_IN)

        assert run_auto_checkout(now=NOW) == {'open': 0, 'processed': 0, 'cleaned': 0}
        assert db.session.get(AttendanceRecord, record_id).check_out_at is None


def test_cleanup_resets_checkouts_on_a_distant_day(app, make_user):
    staff_id = make_user(email='staff@test.local', role='staff')
    with app.app_context():
        broken_id = _record(staff_id, CHECK_IN, datetime(2026, 10, 22, 17, 0), 'auto_checkout')
        overnight_id = _record(staff_id, datetime(2026, 10, 19, 22, 0), datetime(2026, 10, 20, 2, 0),
                               'checked_out')

        assert cleanup_invalid_checkouts() == 1

        broken = db.session.get(AttendanceRecord, broken_id)
        assert broken.check_out_at is None
        assert broken.status == 'checked_in'
        assert db.session.get(AttendanceRecord, overnight_id).check_out_at is not None
