import os
import tempfile
from pathlib import Path

# La base de pruebas se define antes de importar la app
_DB_DIR = Path(tempfile.mkdtemp(prefix="punto_pastelero_tests_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR / 'test.db'}"
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine
from app.main import create_app
from app.models import Role, User
from app.security import get_password_hash


@pytest.fixture()
def client():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with TestClient(create_app()) as test_client:
        yield test_client
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session(client):
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def admin_user(db_session):
    user = User(
        username="admin",
        full_name="Administrador",
        password_hash=get_password_hash("Pass1234!"),
        role=Role.ADMIN,
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def auth_headers(client, admin_user):
    response = client.post("/auth/login", data={"username": "admin", "password": "Pass1234!"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
