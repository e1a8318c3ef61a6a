"""
Wallet user routes: profile, PIN and balance preferences
"""
from flask import Blueprint, request, jsonify, current_app
from flask_login import current_user

from models import db
from utils.auth_utils import user_required
from utils.errors import InvalidInput, Mismatch, Unauthorized
from utils.signature import signature_guard
from utils.validators import validate_pin

user_bp = Blueprint('user', __name__, url_prefix='/api/user')
user_bp.before_request(signature_guard)


@user_bp.route('/me', methods=['GET'])
@user_required
def me():
    return jsonify({"success": True, "message": "User profile", "data": current_user.to_public_dict()})


@user_bp.route('/pin', methods=['PUT', 'POST'])
@user_required
def set_or_update_pin():
    """
    Set the first PIN (pin or newPin), or change it with
    oldPin + newPin + confirmNewPin.
    """
    data = request.get_json(silent=True) or {}
    user = current_user

    if not user.has_pin:
        provided = data.get('pin') or data.get('newPin')
        if not validate_pin(provided):
            raise InvalidInput("Please provide a valid 4-digit PIN to set")
        user.set_pin(provided)
        db.session.commit()
        current_app.logger.info(f"PIN set for user {user.id}")
        return jsonify({"success": True, "message": "PIN set successfully"}), 201

    old_pin = data.get('oldPin')
    new_pin = data.get('newPin')
    confirm_pin = data.get('confirmNewPin')
    if not (validate_pin(old_pin) and validate_pin(new_pin) and validate_pin(confirm_pin)):
        raise InvalidInput("Old, new and confirm PIN must be 4-digit numbers")
    if new_pin != confirm_pin:
        raise Mismatch("New PIN and confirm PIN do not match")
    if not user.check_pin(old_pin):
        raise Unauthorized("Old PIN is incorrect")

    user.set_pin(new_pin)
    db.session.commit()
    current_app.logger.info(f"PIN updated for user {user.id}")
    return jsonify({"success": True, "message": "PIN updated successfully"})


@user_bp.route('/preferred-offline-balance', methods=['PUT'])
@user_required
def update_preferred_offline_balance():
    data = request.get_json(silent=True) or {}
    value = data.get('preferredOfflineBalance')
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise InvalidInput("Please provide a valid preferred offline balance")

    current_user.preferred_offline_balance = value
    db.session.commit()
    return jsonify({"success": True, "message": "Preferred offline balance updated successfully"})
