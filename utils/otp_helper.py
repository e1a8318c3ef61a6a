"""
OTP generation and hashing for email verification.
OTPs are hashed (salted) before storage; never store plain OTP in DB.
"""
import secrets
from datetime import datetime, timedelta

from werkzeug.security import generate_password_hash, check_password_hash

# Defaults; the app config (OTP_*) overrides them
OTP_LENGTH = 6
OTP_EXPIRY_MINUTES = 5


def generate_otp(digits: int = OTP_LENGTH) -> str:
    """Uniform numeric code in [10^(d-1), 10^d - 1]."""
    low = 10 ** (digits - 1)
    high = 10 ** digits - 1
    return str(low + secrets.randbelow(high - low + 1))


def hash_otp(otp: str) -> str:
    """Salted hash of the code for storage."""
    return generate_password_hash(otp)


def verify_otp(plain_otp: str, otp_hash: str) -> bool:
    """Verify a plain OTP against stored hash."""
    if not plain_otp or not otp_hash:
        return False
    return check_password_hash(otp_hash, plain_otp)


def otp_expires_at(minutes: int = OTP_EXPIRY_MINUTES, now=None) -> datetime:
    """Return expiry datetime for a new OTP."""
    return (now or datetime.utcnow()) + timedelta(minutes=minutes)
