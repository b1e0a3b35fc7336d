import pytest

from config import Config
from movewell import create_app, db
from movewell.models.user import User


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key-0123456789abcdef0123456789"
    JWT_SECRET_KEY = "test-jwt-secret-0123456789abcdef0123456789"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    DEDUPE_HABITS = False
    STREAK_UPDATE_ATTEMPTS = 3


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    u = User(name="Nino", email="nino@example.com")
    u.set_password("secret123")
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture
def other_user(app):
    u = User(name="Ana", email="ana@example.com")
    u.set_password("secret456")
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture
def auth_headers(client, user):
    res = client.post(
        "/api/auth/login",
        json={"email": "nino@example.com", "password": "secret123"},
    )
    assert res.status_code == 200
    return {"Authorization": f"Bearer {res.get_json()['token']}"}


@pytest.fixture
def file_app(tmp_path):
    """App on a file database, so a second connection can write concurrently."""

    class FileConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'movewell.db'}"

    app = create_app(FileConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def file_user_id(file_app):
    u = User(name="Nino", email="nino@example.com")
    u.set_password("secret123")
    db.session.add(u)
    db.session.commit()
    return u.id
