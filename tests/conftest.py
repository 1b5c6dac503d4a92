from __future__ import annotations

import os
import tempfile

# Point the app at a throwaway SQLite file before farm_app is imported
_TMP_DIR = tempfile.mkdtemp(prefix="farm_app_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"

import pytest
from fastapi.testclient import TestClient

from farm_app.database import Base, SessionLocal, engine
from farm_app.main import app
from farm_app import models


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_profile(db):
    def _make(user_id: str, role: str, token: str | None = None) -> models.Profile:
        profile = models.Profile(
            user_id=user_id,
            name=user_id.title(),
            role=role,
            access_token=token or f"{user_id}-token",
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile
    return _make


@pytest.fixture
def admin(make_profile):
    return make_profile("admin-user", "admin")


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {admin.access_token}"}
