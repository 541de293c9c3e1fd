import pytest
from fastapi.testclient import TestClient

from scholarstream.auth import issue_token
from scholarstream.config import Settings
from scholarstream.main import create_app
from scholarstream.models import Role, User

ADMIN_EMAIL = "admin@scholarstream.test"
SUPER_ADMIN_EMAIL = "owner@scholarstream.test"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test_temp.db'}",
        jwt_secret="test-secret",
        stripe_secret_key="sk_test_123",
        site_domain="http://localhost:5173",
        admin_email=ADMIN_EMAIL,
        super_admin_email=SUPER_ADMIN_EMAIL,
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def db(client):
    session = client.app.state.database.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def auth_headers(settings):
    def make(email):
        return {"Authorization": f"Bearer {issue_token({'email': email}, settings)}"}
    return make


@pytest.fixture
def make_user(db):
    def make(email, role=Role.STUDENT):
        user = User(email=email, name=email.split("@")[0], role=role.value)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return make
