"""
Account lifecycle API tests: registration, verification, login/session,
forgot and reset password.
"""

from datetime import timedelta

import pytest

from archive_backend.config.settings import settings
from archive_backend.features.user.auth.security import verify_password
from archive_backend.features.user.auth.service import FORGOT_PASSWORD_MESSAGE
from archive_backend.shared.utils import utcnow

pytestmark = pytest.mark.integration


def register_payload(**overrides):
    payload = {
        "username": "karim",
        "email": "karim@example.com",
        "password": "strongpass1",
        "confirmPassword": "strongpass1",
    }
    payload.update(overrides)
    return payload


class TestRegister:
    """POST /api/auth/register"""

    def test_creates_unverified_user_and_sends_link(self, client, db, mail_outbox):
        response = client.post("/api/auth/register", json=register_payload())

        assert response.status_code == 201
        assert response.json()["success"] is True

        user = db.users.find_one({"email": "karim@example.com"})
        assert user["isVerified"] is False
        assert user["verificationToken"]
        assert user["password"] != "strongpass1"
        assert verify_password("strongpass1", user["password"])

        mail_outbox.assert_awaited_once()
        to, subject, body = mail_outbox.await_args.args[:3]
        assert to == "karim@example.com"
        assert f"/verify/{user['verificationToken']}" in body

    def test_mismatched_passwords(self, client, db):
        response = client.post("/api/auth/register", json=register_payload(confirmPassword="different1"))
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION"
        assert db.users.count_documents({}) == 0

    def test_short_password(self, client):
        response = client.post("/api/auth/register", json=register_payload(password="short", confirmPassword="short"))
        assert response.status_code == 400
        assert "at least 8" in response.json()["detail"]

    def test_unverified_collision_reissues_token(self, client, db, create_user, mail_outbox):
        old_created = utcnow() - timedelta(minutes=50)
        create_user(username="karim", email="karim@example.com", is_verified=False,
                    verification_token="old-token", created_at=old_created)

        response = client.post("/api/auth/register", json=register_payload())

        assert response.status_code == 409
        assert "new verification link" in response.json()["detail"]
        user = db.users.find_one({"username": "karim"})
        assert user["verificationToken"] != "old-token"
        assert db.users.count_documents({}) == 1
        mail_outbox.assert_awaited_once()

    def test_verified_collision_is_rejected(self, client, create_user, mail_outbox):
        create_user(username="someone", email="karim@example.com")

        response = client.post("/api/auth/register", json=register_payload())

        assert response.status_code == 409
        assert response.json()["detail"] == "Email or Username is already registered. Please Login."
        assert response.json()["code"] == "CONFLICT"
        mail_outbox.assert_not_awaited()

    def test_mail_failure_removes_new_account(self, client, db, mail_outbox):
        mail_outbox.side_effect = OSError("smtp unreachable")

        response = client.post("/api/auth/register", json=register_payload())

        assert response.status_code == 500
        assert db.users.count_documents({}) == 0


class TestVerify:
    """GET /api/auth/verify/{token}: one hour from createdAt, single use"""

    def test_within_window_succeeds_once(self, client, db, create_user):
        create_user(username="early", is_verified=False, verification_token="tok-59",
                    created_at=utcnow() - timedelta(minutes=59))

        first = client.get("/api/auth/verify/tok-59")
        second = client.get("/api/auth/verify/tok-59")

        assert first.status_code == 200
        assert second.status_code == 404
        user = db.users.find_one({"username": "early"})
        assert user["isVerified"] is True
        assert "verificationToken" not in user

    def test_after_window_is_rejected(self, client, db, create_user):
        create_user(username="late", is_verified=False, verification_token="tok-61",
                    created_at=utcnow() - timedelta(minutes=61))

        response = client.get("/api/auth/verify/tok-61")

        assert response.status_code == 400
        assert db.users.find_one({"username": "late"})["isVerified"] is False

    def test_unknown_token(self, client):
        response = client.get("/api/auth/verify/never-issued")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


class TestLoginAndSession:
    """POST /api/auth/login, GET /api/auth/session, POST /api/auth/logout"""

    def test_login_sets_session_cookie(self, client, create_user):
        create_user(username="rahim", email="rahim@example.com", role="supervisor")

        response = client.post("/api/auth/login", json={"email": "rahim@example.com", "password": "password123"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "user": {"username": "rahim", "role": "supervisor"}}
        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith(f"{settings.SESSION_COOKIE_NAME}=")
        assert "httponly" in set_cookie.lower()

        session = client.get("/api/auth/session").json()["user"]
        assert session["username"] == "rahim"
        assert session["role"] == "supervisor"
        assert "password" not in session

    def test_login_accepts_username(self, client, create_user):
        create_user(username="rahim")
        response = client.post("/api/auth/login", json={"email": "rahim", "password": "password123"})
        assert response.status_code == 200

    @pytest.mark.parametrize("email, password", [
        ("rahim@example.com", "wrong-password"),
        ("nobody@example.com", "password123"),
    ])
    def test_bad_credentials_share_one_message(self, client, create_user, email, password):
        create_user(username="rahim")
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_unverified_user_cannot_log_in(self, client, create_user):
        create_user(username="rahim", is_verified=False)
        response = client.post("/api/auth/login", json={"email": "rahim@example.com", "password": "password123"})
        assert response.status_code == 403
        assert response.json()["code"] == "NOT_VERIFIED"

    def test_anonymous_session(self, client):
        assert client.get("/api/auth/session").json() == {"user": None}

    def test_tampered_cookie_is_anonymous(self, client):
        client.cookies.set(settings.SESSION_COOKIE_NAME, "not-a-jwt")
        assert client.get("/api/auth/session").json() == {"user": None}

    def test_logout_clears_cookie(self, client):
        response = client.post("/api/auth/logout")
        assert response.status_code == 200
        set_cookie = response.headers["set-cookie"].lower()
        assert set_cookie.startswith(f"{settings.SESSION_COOKIE_NAME}=")
        assert "max-age=0" in set_cookie


class TestForgotPassword:
    """POST /api/auth/forgot-password answers identically for every email"""

    def test_unknown_and_known_email_get_same_reply(self, client, db, create_user, mail_outbox):
        create_user(username="rahim")

        unknown = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
        known = client.post("/api/auth/forgot-password", json={"email": "rahim@example.com"})

        assert unknown.status_code == known.status_code == 200
        assert unknown.json() == known.json() == {"success": True, "message": FORGOT_PASSWORD_MESSAGE}
        user = db.users.find_one({"username": "rahim"})
        assert user["passwordResetToken"]
        mail_outbox.assert_awaited_once()

    def test_mail_failure_is_not_revealed(self, client, create_user, mail_outbox):
        create_user(username="rahim")
        mail_outbox.side_effect = OSError("smtp unreachable")

        response = client.post("/api/auth/forgot-password", json={"email": "rahim@example.com"})

        assert response.status_code == 200
        assert response.json()["message"] == FORGOT_PASSWORD_MESSAGE


class TestResetPassword:
    """POST /api/auth/reset-password/{token}"""

    def test_valid_token_sets_new_password(self, client, db, create_user):
        create_user(username="rahim", password_reset_token="reset-1",
                    password_reset_expires=utcnow() + timedelta(minutes=30))

        response = client.post("/api/auth/reset-password/reset-1",
                               json={"password": "brandnew99", "confirmPassword": "brandnew99"})

        assert response.status_code == 200
        user = db.users.find_one({"username": "rahim"})
        assert verify_password("brandnew99", user["password"])
        assert "passwordResetToken" not in user
        assert "passwordResetExpires" not in user

        login = client.post("/api/auth/login", json={"email": "rahim", "password": "brandnew99"})
        assert login.status_code == 200

    def test_expired_token(self, client, create_user):
        create_user(username="rahim", password_reset_token="reset-old",
                    password_reset_expires=utcnow() - timedelta(minutes=1))

        response = client.post("/api/auth/reset-password/reset-old",
                               json={"password": "brandnew99", "confirmPassword": "brandnew99"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Password reset token is invalid or has expired"

    def test_mismatched_passwords(self, client, create_user):
        create_user(username="rahim", password_reset_token="reset-2",
                    password_reset_expires=utcnow() + timedelta(minutes=30))

        response = client.post("/api/auth/reset-password/reset-2",
                               json={"password": "brandnew99", "confirmPassword": "brandnew00"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Passwords do not match"
