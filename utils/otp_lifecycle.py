"""
Email OTP lifecycle: issue, resend (with cooldown) and verify (with attempt cap).

Per user: no code -> active code -> verified | expired | attempts exhausted.
Terminal outcomes delete the row, so the next issue starts from a fresh one.
"""
import math
from datetime import datetime

from flask import current_app

from models import db
from models.otp import OneTimeCode
from models.user import User
from utils.errors import AttemptsExhausted, Expired, InvalidCode, InvalidInput, NotFound, RateLimited
from utils.mail import send_verification_otp_email
from utils.otp_helper import generate_otp, hash_otp, verify_otp, otp_expires_at
from utils.validators import normalize_email

OTP_SENT_MSG = "Verification code sent. Check your email."
OTP_ALREADY_VERIFIED_MSG = "Email is already verified."
OTP_VERIFY_SUCCESS_MSG = "Email verified successfully"
OTP_NOT_FOUND_MSG = "No active verification code. Please request a new one."
OTP_RESEND_COOLDOWN_MSG = "Please wait {seconds} seconds before requesting another code."


def _setting(name):
    return current_app.config[name]


def issue_otp(user, now=None):
    """
    Generate, store (hashed) and email a new code for the user.
    Replaces any prior code. Email failure is logged; the stored code stays valid.

    Returns the stored OneTimeCode row.
    """
    now = now or datetime.utcnow()
    digits = _setting('OTP_DIGITS')
    expiry_minutes = _setting('OTP_EXPIRY_MINUTES')

    code = generate_otp(digits)
    row = OneTimeCode.query.filter_by(user_id=user.id).first()
    if row:
        row.code_hash = hash_otp(code)
        row.expires_at = otp_expires_at(expiry_minutes, now=now)
        row.last_sent_at = now
        row.resend_count = (row.resend_count or 0) + 1
    else:
        row = OneTimeCode(
            user_id=user.id,
            code_hash=hash_otp(code),
            expires_at=otp_expires_at(expiry_minutes, now=now),
            attempts=0,
            last_sent_at=now,
            resend_count=0,
        )
        db.session.add(row)
    db.session.commit()

    try:
        send_verification_otp_email(user.email, code, expiry_minutes)
    except Exception as e:
        current_app.logger.error(f"Failed to send verification OTP to {user.email}: {str(e)}", exc_info=True)
        # Don't fail the caller; the user can resend
    return row


def _find_user(email):
    email = normalize_email(email)
    if not email:
        raise InvalidInput("Please provide an email address.")
    user = User.query.filter_by(email=email).first()
    if not user:
        raise NotFound("User not found")
    return user


def resend_otp(email, now=None):
    """
    Issue a new code if the cooldown since the last send has elapsed.

    Returns a message; raises NotFound / RateLimited.
    """
    now = now or datetime.utcnow()
    user = _find_user(email)
    if user.is_verified:
        return OTP_ALREADY_VERIFIED_MSG

    cooldown = _setting('OTP_RESEND_COOLDOWN_SECONDS')
    row = OneTimeCode.query.filter_by(user_id=user.id).first()
    if row and row.last_sent_at:
        elapsed_ms = (now - row.last_sent_at).total_seconds() * 1000
        remaining_ms = cooldown * 1000 - elapsed_ms
        if remaining_ms > 0:
            wait = math.ceil(remaining_ms / 1000)
            raise RateLimited(OTP_RESEND_COOLDOWN_MSG.format(seconds=wait), retryAfterSeconds=wait)

    issue_otp(user, now=now)
    return OTP_SENT_MSG


def _delete(row):
    OneTimeCode.query.filter_by(id=row.id).delete()
    db.session.commit()


def verify_otp_code(email, code, now=None):
    """
    Check a submitted code. Every comparison consumes one attempt.

    Returns the verified User; raises NotFound / Expired / AttemptsExhausted / InvalidCode.
    """
    now = now or datetime.utcnow()
    if code is None or str(code).strip() == '':
        raise InvalidInput("Please provide email and otp")
    code = str(code).strip()
    user = _find_user(email)
    max_attempts = _setting('OTP_MAX_ATTEMPTS')

    row = OneTimeCode.query.filter_by(user_id=user.id).first()
    if not row:
        raise NotFound(OTP_NOT_FOUND_MSG)

    if row.is_expired(now):
        _delete(row)
        raise Expired()

    if row.attempts_exceeded(max_attempts):
        _delete(row)
        raise AttemptsExhausted()

    # Increment-and-check in one UPDATE so concurrent guesses cannot both pass the cap
    claimed = OneTimeCode.query.filter(
        OneTimeCode.id == row.id,
        OneTimeCode.attempts < max_attempts,
    ).update(
        {OneTimeCode.attempts: OneTimeCode.attempts + 1, OneTimeCode.last_attempt_at: now},
        synchronize_session=False,
    )
    db.session.commit()
    if not claimed:
        _delete(row)
        raise AttemptsExhausted()
    db.session.refresh(row)

    if not verify_otp(code, row.code_hash):
        remaining = max(max_attempts - row.attempts, 0)
        if remaining == 0:
            _delete(row)
        raise InvalidCode("Invalid verification code.", attemptsRemaining=remaining)

    user.is_verified = True
    OneTimeCode.query.filter_by(id=row.id).delete()
    db.session.commit()
    current_app.logger.info(f"Email verified for user {user.id}")
    return user
