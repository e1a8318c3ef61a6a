"""
One-time code model for email verification (PostgreSQL-compatible).
"""
from models import db
from datetime import datetime


class OneTimeCode(db.Model):
    """
    Stores hashed OTP for email verification.
    One record per user (unique user_id); replaced on new send, deleted on
    success, expiry or when the attempt budget runs out.
    """
    __tablename__ = 'one_time_codes'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                        unique=True, nullable=False)
    code_hash = db.Column(db.String(255), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    attempts = db.Column(db.Integer, nullable=False, default=0)
    last_attempt_at = db.Column(db.DateTime, nullable=True)
    last_sent_at = db.Column(db.DateTime, nullable=True)
    resend_count = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def is_expired(self, now=None):
        return (now or datetime.utcnow()) > self.expires_at

    def attempts_exceeded(self, max_attempts):
        return (self.attempts or 0) >= max_attempts

    def __repr__(self):
        return f'<OneTimeCode user={self.user_id}>'
