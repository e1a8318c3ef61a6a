"""
Authentication routes: register, login, email verification (OTP) and resend
"""
from flask import Blueprint, request, jsonify, current_app
from flask_login import current_user

from models import db
from models.user import User
from utils.auth_utils import create_access_token, token_required
from utils.errors import AlreadyExists, InvalidCredentials, InvalidInput, NotVerified
from utils.otp_lifecycle import issue_otp, resend_otp, verify_otp_code, OTP_VERIFY_SUCCESS_MSG
from utils.validators import normalize_email, text_field, validate_email

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')

REGISTER_SUCCESS_MSG = "User registered successfully. Please check your email for the verification code."
NOT_VERIFIED_MSG = ("Your email is not verified. We have sent a new verification code to your email; "
                    "verify it to log in.")
INVALID_CREDENTIALS_MSG = "Invalid credentials"


def _json_body():
    data = request.get_json(silent=True)
    if data is None and request.data:
        raise InvalidInput("Invalid JSON format in request body")
    return data if isinstance(data, dict) else (request.form or {})


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create an unverified user and send the first verification code"""
    data = _json_body()
    name = text_field(data, 'name')
    email = normalize_email(text_field(data, 'email'))
    password = text_field(data, 'password', strip=False)

    if not name or not email or not password:
        raise InvalidInput("Please add all fields")
    if not validate_email(email):
        raise InvalidInput("Please provide a valid email address.")

    if User.query.filter_by(email=email).first():
        raise AlreadyExists("User already exists")

    user = User(name=name, email=email, is_verified=False)
    user.set_password(password)
    for field, key in (('phone', 'phone'), ('address', 'address')):
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            setattr(user, field, value.strip())
    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f"New user {email} registered")

    issue_otp(user)

    return jsonify({
        "success": True,
        "message": REGISTER_SUCCESS_MSG,
        "data": user.to_identity_dict(),
    }), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """Issue a bearer token for verified users"""
    data = _json_body()
    email = normalize_email(text_field(data, 'email'))
    password = text_field(data, 'password', strip=False)

    if not email or not password:
        raise InvalidInput("Please provide email and password")

    user = User.query.filter_by(email=email).first()
    if not user or user.deleted_at is not None or not user.check_password(password):
        current_app.logger.warning(f"Failed login attempt for email: {email}")
        raise InvalidCredentials(INVALID_CREDENTIALS_MSG)

    if not user.is_verified:
        issue_otp(user)
        raise NotVerified(NOT_VERIFIED_MSG, data={"email": user.email, "isVerified": False})

    current_app.logger.info(f"User {email} logged in")
    return jsonify({
        "success": True,
        "message": "User logged in successfully",
        "data": {
            "id": user.id,
            "createdAt": user.created_at.isoformat() if user.created_at else None,
            "role": user.role,
            "user": user.to_public_dict(),
            "token": create_access_token(user.id),
        },
    })


@auth_bp.route('/verify', methods=['POST'])
def verify():
    """Verify the emailed code and mark the account verified"""
    data = _json_body()
    email = data.get('email')
    otp = data.get('otp')
    if not email or otp in (None, ''):
        raise InvalidInput("Please provide email and otp")

    user = verify_otp_code(email, otp)
    return jsonify({
        "success": True,
        "message": OTP_VERIFY_SUCCESS_MSG,
        "data": user.to_identity_dict(),
    })


@auth_bp.route('/resend-otp', methods=['POST'])
def resend():
    """Send a fresh code, subject to the resend cooldown"""
    data = _json_body()
    if not data.get('email'):
        raise InvalidInput("Please provide an email address.")
    message = resend_otp(data.get('email'))
    return jsonify({"success": True, "message": message})


@auth_bp.route('/me', methods=['GET'])
@token_required
def me():
    return jsonify({"success": True, "message": "User profile", "data": current_user.to_public_dict()})
