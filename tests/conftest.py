import pytest

from app import create_app
from config import TestingConfig
from models import db
from models.user import User
from utils.auth_utils import create_access_token

FIXED_OTP = '123456'


@pytest.fixture
def app(tmp_path):
    class Config(TestingConfig):
        CLIENT_KEY_FILE = str(tmp_path / 'client.key')

    app = create_app(Config)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def fixed_otp(monkeypatch):
    """Pin generated verification codes so tests can submit them."""
    monkeypatch.setattr('utils.otp_lifecycle.generate_otp', lambda digits=6: FIXED_OTP)
    return FIXED_OTP


@pytest.fixture
def make_user(app):
    """Insert a user and return its id."""
    def _make(email='user@test.local', role='user', password='secret123', verified=True, name=None, **fields):
        with app.app_context():
            user = User(name=name or email.split('@')[0], email=email, role=role,
                        is_verified=verified, **fields)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make


@pytest.fixture
def auth_header(app):
    def _header(user_id):
        with app.app_context():
            return {'Authorization': f'Bearer {create_access_token(user_id)}'}
    return _header


@pytest.fixture
def admin_id(app):
    with app.app_context():
        return User.query.filter_by(email=app.config['SEED_ADMIN_EMAIL']).first().id
