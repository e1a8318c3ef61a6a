"""
HMAC request signing for client apps.

The client signs METHOD + path[?query] + json(query) + json(body) + timestamp
with a shared key that the server persists in CLIENT_KEY_FILE.
"""
import hmac
import hashlib
import json
import logging
import os
import secrets
import time

from flask import current_app, jsonify, request

logger = logging.getLogger(__name__)

REASON_STALE = 'stale'
REASON_INVALID = 'invalid_signature'


def load_or_create_client_key(path):
    """Reuse the key stored at path, or create and persist a new 256-bit hex key."""
    if os.path.exists(path):
        with open(path, 'r', encoding='utf-8') as f:
            return f.read().strip()
    key = secrets.token_hex(32)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(key)
    logger.warning("New API client key created at %s", path)
    return key


def get_client_key():
    key = current_app.extensions.get('client_key')
    if key is None:
        key = load_or_create_client_key(current_app.config['CLIENT_KEY_FILE'])
        current_app.extensions['client_key'] = key
    return key


def _compact_json(value):
    return json.dumps(value, separators=(',', ':'), ensure_ascii=False)


def signing_payload(method, path, query_string, query, body, timestamp):
    """Canonical string the client and server both sign."""
    url = path + ('?' + query_string if query_string else '')
    return f"{method.upper()}{url}{_compact_json(query)}{_compact_json(body)}{timestamp}"


def compute_signature(key, payload):
    return hmac.new(key.encode('utf-8'), payload.encode('utf-8'), hashlib.sha256).hexdigest()


def verify_request_signature(key, now_ms=None):
    """
    Check X-Signature / X-Timestamp on the current request.

    Returns (valid, reason) where reason is None, 'stale' or 'invalid_signature'.
    """
    sig = request.headers.get('X-Signature')
    ts_raw = request.headers.get('X-Timestamp')
    if not sig or not ts_raw:
        return False, REASON_INVALID
    try:
        ts = int(ts_raw)
    except ValueError:
        return False, REASON_INVALID

    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    if abs(now_ms - ts) > current_app.config.get('SIGNATURE_TIME_WINDOW_MS', 30000):
        return False, REASON_STALE

    payload = signing_payload(
        request.method,
        request.path,
        request.query_string.decode('utf-8'),
        request.args.to_dict(),
        request.get_json(silent=True) or {},
        ts_raw,
    )
    expected = compute_signature(key, payload)
    if hmac.compare_digest(sig, expected):
        return True, None
    return False, REASON_INVALID


def signature_guard():
    """before_request hook for blueprints that require signed requests."""
    config = current_app.config
    if not config.get('API_SIGNATURE_REQUIRED'):
        return None
    if not config.get('PRODUCTION') and config.get('SKIP_API_SIGNATURE'):
        return None

    valid, reason = verify_request_signature(get_client_key())
    if valid:
        return None
    current_app.logger.warning(f"Rejected request signature on {request.path}: {reason}")
    if reason == REASON_STALE:
        return jsonify({
            'success': False,
            'error': REASON_STALE,
            'message': 'Request timestamp is stale. Please ensure your device clock is synchronized',
        }), 410
    return jsonify({
        'success': False,
        'error': REASON_INVALID,
        'message': 'Request signature verification failed',
    }), 401
