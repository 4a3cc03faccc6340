"""
Pytest configuration.

Provides an in-memory MongoDB (mongomock), a FastAPI test client, user and
session factories, and a patched mail sender so no test talks to SMTP.
"""

import os

# Settings are read on import, so the environment must be ready first
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("DB_NAME", "chilahati_archive_test")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("EMAIL_USER", "archive.team@example.com")
os.environ.setdefault("BASE_URL", "http://archive.example.com")

from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from unittest.mock import AsyncMock, patch

import mongomock
import pytest
from fastapi.testclient import TestClient

from archive_backend.api.main import app
from archive_backend.config.settings import settings
from archive_backend.db import mongo_client as database
from archive_backend.features.user.auth.security import create_session_token, hash_password
from archive_backend.models.auth import SessionData
from archive_backend.models.user import User


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: exercises the app through the HTTP test client")


# ==================== Database Fixtures ====================

@pytest.fixture(scope="function")
def db():
    """
    Fresh in-memory database per test, installed as the app's handle.
    Indexes (unique slug/username/email) are created as in production.
    """
    mock_db = mongomock.MongoClient().get_database(settings.DB_NAME)
    database.use_database(mock_db)
    yield mock_db
    database.mongo_db = None


# ==================== Mail Fixtures ====================

@pytest.fixture(scope="function")
def mail_outbox():
    """Replaces send_mail; inspect calls with mail_outbox.await_args_list."""
    with patch("archive_backend.shared.email.send_mail", new_callable=AsyncMock) as send:
        yield send


# ==================== Client Fixtures ====================

@pytest.fixture(scope="function")
def client(db, mail_outbox) -> TestClient:
    # No context manager: startup would try to reach a real MongoDB
    return TestClient(app)


# ==================== Test Data Fixtures ====================

@pytest.fixture(scope="function")
def create_user(db):
    """
    Factory inserting a user document with a hashed password.
    Returns the stored document (including _id).
    """
    def _create(username: str = "rahim", email: str = None, password: str = "password123",
                role: str = "user", is_verified: bool = True, **extra: Any) -> Dict[str, Any]:
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            password=hash_password(password),
            role=role,
            is_verified=is_verified,
            **extra,
        )
        document = user.to_document()
        document["_id"] = db.users.insert_one(document).inserted_id
        return document

    return _create


@pytest.fixture(scope="function")
def login_as(client):
    """Puts a signed session cookie for the given user document on the client."""
    def _login(user_document: Dict[str, Any]) -> TestClient:
        session = SessionData(
            user_id=str(user_document["_id"]),
            username=user_document["username"],
            email=user_document["email"],
            role=user_document.get("role", "user"),
        )
        client.cookies.set(settings.SESSION_COOKIE_NAME, create_session_token(session))
        return client

    return _login


@pytest.fixture(scope="function")
def staff_client(create_user, login_as) -> TestClient:
    admin = create_user(username="archivist", role="admin")
    return login_as(admin)


@pytest.fixture(scope="function")
def insert_item(db):
    """Factory inserting a raw archive item document."""
    counter = {"n": 0}

    def _insert(**fields: Any) -> Dict[str, Any]:
        counter["n"] += 1
        document = {
            "title": f"Item {counter['n']}",
            "slug": f"item-{counter['n']}",
            "category": "history",
            "bodyContent": [],
            "tags": [],
            "createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(days=counter["n"]),
        }
        document.update(fields)
        document["_id"] = db.archive_items.insert_one(document).inserted_id
        return document

    return _insert
