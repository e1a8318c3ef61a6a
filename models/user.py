"""
User model definition
"""
from models import db
from datetime import datetime
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

ROLE_USER = 'user'
ROLE_STAFF = 'staff'
ROLE_ADMIN = 'admin'


class User(UserMixin, db.Model):
    """Account for wallet users, staff and admins"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_USER)
    pin_hash = db.Column(db.String(255), nullable=True)

    # Wallet
    balance = db.Column(db.Float, nullable=True, default=0)
    online_balance = db.Column(db.Float, nullable=True, default=0)
    offline_balance = db.Column(db.Float, nullable=True, default=0)
    preferred_offline_balance = db.Column(db.Float, nullable=True)
    online_limit = db.Column(db.Float, nullable=True)
    offline_limit = db.Column(db.Float, nullable=True)
    currency = db.Column(db.String(10), nullable=True)

    # Profile
    profile_picture = db.Column(db.String(255), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(20), nullable=True)
    position = db.Column(db.String(100), nullable=True)

    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    deleted_at = db.Column(db.DateTime, nullable=True)

    otp = db.relationship('OneTimeCode', backref='user', uselist=False, lazy=True,
                          cascade='all, delete-orphan')

    def set_password(self, password):
        """Set password hash (salted per call)"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check if password matches"""
        return check_password_hash(self.password_hash, password)

    def set_pin(self, pin):
        self.pin_hash = generate_password_hash(pin)

    def check_pin(self, pin):
        return bool(self.pin_hash) and check_password_hash(self.pin_hash, pin)

    @property
    def has_pin(self):
        return self.pin_hash is not None

    def to_identity_dict(self):
        """Fields returned right after registration"""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'isVerified': bool(self.is_verified),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    def to_public_dict(self):
        """Profile projection returned on login and /me"""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'balance': self.balance or 0,
            'currency': self.currency or None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'profilePicture': self.profile_picture or None,
            'address': self.address or None,
            'phone': self.phone or None,
            'isVerified': bool(self.is_verified),
            'hasPin': self.has_pin,
        }

    def to_admin_dict(self):
        """Row for the admin user listing"""
        data = self.to_public_dict()
        data.update({
            'position': self.position,
            'onlineBalance': self.online_balance or 0,
            'offlineBalance': self.offline_balance or 0,
            'preferredOfflineBalance': self.preferred_offline_balance,
            'onlineLimit': self.online_limit,
            'offlineLimit': self.offline_limit,
        })
        return data

    def __repr__(self):
        return f'<User {self.email}>'
