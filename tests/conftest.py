import pytest
from starlette.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.main import app
from app.core.database import get_db
from app.core.security import get_current_user
from app.models import Base
from app.models.user import User
from unittest.mock import MagicMock


def make_user(**overrides):
    values = dict(
        id="test_user_id",
        user_id="USR260101000001",
        name="Test User",
        email="test@example.com",
        mobile="9876543210",
        hashed_password="x",
        is_email_verified=True,
        role="user",
        is_active=True,
    )
    values.update(overrides)
    return User(**values)


# Mock DB Session
def override_get_db():
    try:
        db = MagicMock()
        yield db
    finally:
        pass


# Mock Current User
def override_get_current_user():
    return make_user()


app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_current_user] = override_get_current_user


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_client(client):
    app.dependency_overrides[get_current_user] = lambda: make_user(id="admin_id", role="admin")
    yield client
    app.dependency_overrides[get_current_user] = override_get_current_user


@pytest.fixture
def db_session():
    # SQLite has no schemas; map the "udin" schema onto the default one
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    ).execution_options(schema_translate_map={"udin": None})
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def verified_user(db_session):
    user = make_user()
    db_session.add(user)
    db_session.commit()
    return user
