from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from villa_admin.core.config import settings
from villa_admin.database.session import get_db, init_db
from villa_admin.main import app
from villa_admin.services.seed_service import ensure_seed_data


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def seeded_db(db):
    ensure_seed_data(db)
    return db


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    response = client.post(
        "/auth/login",
        data={"email": settings.ADMIN_EMAIL, "password": settings.ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return client


@pytest.fixture
def demo_client():
    """App with no database behind it."""
    app.dependency_overrides[get_db] = lambda: None
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def stay():
    check_in = date.today() + timedelta(days=10)
    return check_in, check_in + timedelta(days=2)


@pytest.fixture
def guest():
    return {
        "guest_name": "Asha Rao",
        "email": "asha@mail.com",
        "phone": "9876543210",
    }
