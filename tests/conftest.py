import base64
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import Settings, settings
from app.database import Base, make_engine
from app.dependencies import SESSION_COOKIE_NAME, get_db
from app.main import create_app
from app.models.guest import Guest
from app.models.invitation import Invitation
from app.security import SecretMaterial
from app.services.roster import RosterManager
from app.services.sessions import create_session
from app.tokens import TokenCodec

TEST_SECRET = base64.b64encode(b"k" * 32).decode()
ADMIN_KEY = "admin0001"

test_engine = make_engine(settings.test_database_url, poolclass=StaticPool)
TestSession = sessionmaker(bind=test_engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db():
    connection = test_engine.connect()
    transaction = connection.begin()
    session = TestSession(bind=connection)
    yield session
    session.close()
    transaction.rollback()
    connection.close()


def make_settings(**overrides) -> Settings:
    values = {
        "secret_key": TEST_SECRET,
        "environment": "development",
        "admin_keys": [ADMIN_KEY],
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def make_client(db):
    apps = []

    def _make(**overrides) -> TestClient:
        application = create_app(make_settings(**overrides))

        def override_get_db():
            yield db

        application.dependency_overrides[get_db] = override_get_db
        apps.append(application)
        return TestClient(application)

    yield _make
    for application in apps:
        application.dependency_overrides.clear()


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def secret():
    return SecretMaterial.from_setting(TEST_SECRET)


@pytest.fixture
def codec(secret):
    return TokenCodec(secret)


@pytest.fixture
def roster():
    return RosterManager(meal_options=settings.meal_options)


@pytest.fixture
def invitation(db):
    invitation = Invitation(key="abcd1234", display_name="Popescu", max_guests=2)
    db.add(invitation)
    db.flush()
    return invitation


@pytest.fixture
def other_invitation(db):
    invitation = Invitation(key="wxyz5678", display_name="Ionescu", max_guests=4)
    db.add(invitation)
    db.flush()
    return invitation


@pytest.fixture
def admin_invitation(db):
    invitation = Invitation(key=ADMIN_KEY, display_name="Hosts", max_guests=2)
    db.add(invitation)
    db.flush()
    return invitation


@pytest.fixture
def auth_session(db, invitation):
    return create_session(db, invitation, duration=timedelta(days=30))


@pytest.fixture
def auth_client(client, auth_session, codec):
    client.cookies.set(SESSION_COOKIE_NAME, codec.create(auth_session.id))
    return client


@pytest.fixture
def admin_client(client, db, admin_invitation, codec):
    session = create_session(db, admin_invitation, duration=timedelta(days=30))
    client.cookies.set(SESSION_COOKIE_NAME, codec.create(session.id))
    return client


@pytest.fixture
def other_guest(db, other_invitation):
    guest = Guest(invitation_key=other_invitation.key, name="Mallory")
    db.add(guest)
    db.flush()
    return guest
