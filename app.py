"""
Flask application factory for the Staff Wallet & Attendance API
"""
import os
import logging
from flask import Flask, current_app, jsonify
from flask_cors import CORS

from config import Config
from logging_config import setup_logging
from models import db
from models.attendance import AttendanceTimes
from models.user import User, ROLE_ADMIN
from utils.auth_utils import login_manager
from utils.errors import register_error_handlers
from utils.mail import mail
from utils.scheduler import init_scheduler

logger = logging.getLogger(__name__)


def _cors_origins(value):
    origins = [o.strip() for o in (value or '').split(',') if o.strip()]
    if not origins or '*' in origins:
        return '*'
    return origins


def create_app(config_class=Config):
    """Application factory pattern. DB init runs inside app_context; non-fatal on failure."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    setup_logging(timezone=app.config.get('APP_TIMEZONE'))

    db.init_app(app)
    login_manager.init_app(app)
    mail.init_app(app)
    origins = _cors_origins(app.config.get('CORS_DOMAINS'))
    CORS(app, resources={r"/api/*": {"origins": origins}}, send_wildcard=origins == '*')

    register_error_handlers(app)

    from routes import auth_bp, user_bp, staff_bp, admin_bp
    app.register_blueprint(auth_bp)
    app.register_blueprint(user_bp)
    app.register_blueprint(staff_bp)
    app.register_blueprint(admin_bp)

    @app.route('/api/health')
    def health():
        return jsonify({"success": True, "status": "ok"})

    # Create tables and seed only inside app context; do not crash if DB temporarily unavailable
    with app.app_context():
        try:
            db.create_all()
            seed_admin()
            seed_attendance_times()
        except Exception as e:
            db.session.rollback()
            logger.warning("Database init/seed skipped (non-fatal): %s", e)

    init_scheduler(app)
    return app


def seed_admin():
    """Ensure the default admin exists and is a verified admin."""
    email = current_app.config['SEED_ADMIN_EMAIL']
    admin = User.query.filter_by(email=email).first()
    if not admin:
        admin = User(
            name=current_app.config['SEED_ADMIN_NAME'],
            email=email,
            role=ROLE_ADMIN,
            is_verified=True,
        )
        admin.set_password(current_app.config['SEED_ADMIN_PASSWORD'])
        db.session.add(admin)
        db.session.commit()
        logger.info("Admin ready. Email: %s", email)
    elif admin.role != ROLE_ADMIN or not admin.is_verified:
        admin.role = ROLE_ADMIN
        admin.is_verified = True
        db.session.commit()


def seed_attendance_times():
    """Create the single attendance-times row if it is missing."""
    if AttendanceTimes.current():
        return
    db.session.add(AttendanceTimes(
        id=1,
        check_in_time=current_app.config['DEFAULT_CHECK_IN_TIME'],
        check_out_time=current_app.config['DEFAULT_CHECK_OUT_TIME'],
    ))
    db.session.commit()


if __name__ == "__main__":
    app = create_app()
    port = int(os.environ.get("PORT", 8080))
    # The reloader would start a second scheduler
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "false").lower() in ("true", "1"),
            use_reloader=False)
