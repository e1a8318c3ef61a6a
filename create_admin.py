"""
Script to create or reset an admin user
Usage: python create_admin.py [email] [password]
"""
import sys

from app import create_app
from config import Config
from models import db
from models.user import User, ROLE_ADMIN


class ScriptConfig(Config):
    """One-off run: no background jobs."""
    SCHEDULER_ENABLED = False


def create_admin(email, password, name="Admin User", config_class=ScriptConfig):
    """Create or reset admin user; returns the app it ran against"""
    app = create_app(config_class)

    with app.app_context():
        email = email.strip().lower()
        admin = User.query.filter_by(email=email).first()

        if admin:
            admin.set_password(password)
            admin.role = ROLE_ADMIN
            admin.is_verified = True
            admin.deleted_at = None
            db.session.commit()
            print("[SUCCESS] Admin user password reset successfully!")
        else:
            admin = User(name=name, email=email, role=ROLE_ADMIN, is_verified=True)
            admin.set_password(password)
            db.session.add(admin)
            db.session.commit()
            print("[SUCCESS] Admin user created successfully!")

        print("\n" + "=" * 50)
        print("ADMIN LOGIN CREDENTIALS:")
        print("=" * 50)
        print("Endpoint: POST /api/auth/login")
        print(f"Email: {email}")
        print("=" * 50)

    return app


if __name__ == '__main__':
    args = sys.argv[1:]
    if len(args) == 2:
        create_admin(args[0], args[1])
    else:
        create_admin(Config.SEED_ADMIN_EMAIL, Config.SEED_ADMIN_PASSWORD, Config.SEED_ADMIN_NAME)
