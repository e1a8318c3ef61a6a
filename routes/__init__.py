"""
Routes package for the Staff Wallet API
"""
from routes.auth import auth_bp
from routes.user import user_bp
from routes.staff import staff_bp
from routes.admin import admin_bp

__all__ = [
    'auth_bp',
    'user_bp',
    'staff_bp',
    'admin_bp',
]
