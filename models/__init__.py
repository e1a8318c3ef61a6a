"""
Models package for the Staff Wallet API
"""
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

# Import all models here to ensure they're registered
from models.user import User
from models.otp import OneTimeCode
from models.attendance import AttendanceRecord, BreakRecord, AttendanceTimes, LeaveRequest, CheckInReminder

__all__ = [
    'db',
    'User',
    'OneTimeCode',
    'AttendanceRecord',
    'BreakRecord',
    'AttendanceTimes',
    'LeaveRequest',
    'CheckInReminder',
]
