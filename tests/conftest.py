# tests/conftest.py
import os
import sys
import tempfile

# Ensure root import, and configure before the app module reads the environment
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
os.environ.setdefault("AUTH_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="catalog-uploads-")
os.environ["PUBLIC_BASE_URL"] = ""
os.environ["OTP_ECHO"] = "true"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from catalog_service import models  # noqa: F401
from catalog_service import notifier
from catalog_service.app import app, get_image_store
from catalog_service.attachments import ImageStore
from catalog_service.config import CatalogConfig
from catalog_service.database import Base, get_db


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def image_store():
    store = ImageStore(CatalogConfig.UPLOAD_DIR)
    store.ensure_root()
    return store


@pytest.fixture(autouse=True)
def sent_codes(monkeypatch):
    # keep real SendGrid/Twilio out of the tests, record what would be sent
    sent = []
    monkeypatch.setattr(
        notifier, "deliver_code", lambda identifier, otp: sent.append((identifier, otp)) or True
    )
    return sent


@pytest.fixture
def client(session_factory, image_store):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_store] = lambda: image_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    def _login(identifier="alice@example.com"):
        resp = client.post("/api/auth/login", json={"emailOrPhone": identifier})
        assert resp.status_code == 200
        body = resp.json()
        resp = client.post(
            "/api/auth/verify-otp", json={"userId": body["userId"], "otp": body["otp"]}
        )
        assert resp.status_code == 200
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _login


@pytest.fixture
def product_form():
    return {
        "productName": "Trail Mix",
        "productType": "Foods",
        "quantityStock": "12",
        "mrp": "250",
        "sellingPrice": "199.5",
        "brandName": "Nutty",
        "exchangeEligibility": "Yes",
    }
