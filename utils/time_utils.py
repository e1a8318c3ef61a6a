"""
Local wall-clock helpers. Attendance timestamps are stored as naive datetimes
in APP_TIMEZONE so that calendar-date comparisons match the office day.
"""
from datetime import datetime, time, timedelta

import pytz
from flask import current_app

from utils.validators import parse_time_of_day


def app_timezone():
    return pytz.timezone(current_app.config.get('APP_TIMEZONE', 'Asia/Kolkata'))


def local_now():
    """Current time in APP_TIMEZONE as a naive datetime."""
    return datetime.now(app_timezone()).replace(tzinfo=None)


def start_of_day(value):
    return datetime.combine(value.date(), time.min)


def end_of_day(value):
    return start_of_day(value) + timedelta(days=1) - timedelta(microseconds=1)


def at_time_of_day(day, time_str):
    """Combine the date of `day` with an HH:MM[:SS] string. Raises ValueError on bad input."""
    hours, minutes, seconds = parse_time_of_day(time_str)
    return datetime.combine(day.date(), time(hours, minutes, seconds))


def display(value):
    """Human readable local time, e.g. 19/10/2026, 09:00:00 AM"""
    return value.strftime('%d/%m/%Y, %I:%M:%S %p')
