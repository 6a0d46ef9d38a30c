"""HTTP tests for /api/request-otp, /api/verify-otp, /api/logout, /api/check-auth and the admin guard."""

import unittest
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import patch

import jwt

from app.api.routes.auth import require_admin
from app.core.config import get_settings
from app.core.errors import Forbidden
from app.core.security import create_session_token
from app.models import User
from tests.support import ADMIN_PASSWORD, ApiTestCase, make_user


class TestOtpLogin(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = make_user(self.db)

    def test_full_login_flow(self) -> None:
        resp = self.client.post(
            "/api/request-otp", json={"username": "admin", "password": ADMIN_PASSWORD}
        )
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["message"], "OTP sent successfully")
        self.assertEqual(body["email"], "adm****@example.com")
        self.assertEqual(body["requestId"], self.admin.id)

        resp = self.client.post(
            "/api/verify-otp",
            json={"requestId": body["requestId"], "otp": self.notifier.last_code},
        )
        self.assertEqual(resp.status_code, 200)
        token = resp.json()["token"]
        self.assertEqual(resp.json()["message"], "Login successful")
        self.assertEqual(token.count("."), 2)

        set_cookie = resp.headers["set-cookie"]
        self.assertIn(f"adminToken={token}", set_cookie)
        self.assertIn("HttpOnly", set_cookie)
        self.assertIn("Max-Age=86400", set_cookie)
        self.assertIn("Path=/", set_cookie)

    def test_wrong_password_and_unknown_user_look_the_same(self) -> None:
        wrong_pw = self.client.post(
            "/api/request-otp", json={"username": "admin", "password": "nope"}
        )
        unknown = self.client.post(
            "/api/request-otp", json={"username": "ghost", "password": "nope"}
        )
        self.assertEqual(wrong_pw.status_code, 401)
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(wrong_pw.json(), {"error": "Invalid credentials"})
        self.assertEqual(unknown.json(), wrong_pw.json())

    def test_notification_failure_is_generic_500(self) -> None:
        self.notifier.fail = True
        resp = self.client.post(
            "/api/request-otp", json={"username": "admin", "password": ADMIN_PASSWORD}
        )
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "Failed to send OTP"})

    def test_never_issued_code_is_invalid_otp(self) -> None:
        self.client.post(
            "/api/request-otp", json={"username": "admin", "password": ADMIN_PASSWORD}
        )
        wrong = "000000" if self.notifier.last_code != "000000" else "111111"
        resp = self.client.post(
            "/api/verify-otp", json={"requestId": self.admin.id, "otp": wrong}
        )
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Invalid OTP"})

    def test_numeric_otp_is_compared_as_a_string(self) -> None:
        with patch("app.services.otp_auth.generate_otp", return_value="654321"):
            self.client.post(
                "/api/request-otp", json={"username": "admin", "password": ADMIN_PASSWORD}
            )
        resp = self.client.post(
            "/api/verify-otp", json={"requestId": self.admin.id, "otp": 123456}
        )
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Invalid OTP"})

        resp = self.client.post(
            "/api/verify-otp", json={"requestId": self.admin.id, "otp": 654321}
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "Login successful")

    def test_cookie_lifetime_follows_token_lifetime(self) -> None:
        short = get_settings().model_copy(update={"JWT_EXPIRE_MINUTES": 30})
        with patch("app.api.routes.auth.get_settings", return_value=short), patch(
            "app.core.security.settings", short
        ):
            self.client.post(
                "/api/request-otp", json={"username": "admin", "password": ADMIN_PASSWORD}
            )
            resp = self.client.post(
                "/api/verify-otp",
                json={"requestId": self.admin.id, "otp": self.notifier.last_code},
            )
        self.assertEqual(resp.status_code, 200)
        self.assertIn("Max-Age=1800", resp.headers["set-cookie"])
        payload = jwt.decode(resp.json()["token"], options={"verify_signature": False})
        self.assertEqual(payload["exp"] - payload["iat"], 1800)

    def test_verify_without_pending_code(self) -> None:
        resp = self.client.post(
            "/api/verify-otp", json={"requestId": self.admin.id, "otp": "123456"}
        )
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "OTP expired or invalid"})

    def test_verify_unknown_request_id(self) -> None:
        resp = self.client.post(
            "/api/verify-otp", json={"requestId": "missing", "otp": "123456"}
        )
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Invalid user"})

    def test_code_is_single_use(self) -> None:
        self.login()
        resp = self.client.post(
            "/api/verify-otp",
            json={"requestId": self.admin.id, "otp": self.notifier.last_code},
        )
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "OTP expired or invalid"})

    def test_malformed_body_is_rejected(self) -> None:
        resp = self.client.post("/api/request-otp", json={"username": "admin"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Missing required fields")

        resp = self.client.post(
            "/api/request-otp",
            json={"username": "admin", "password": ADMIN_PASSWORD, "role": "root"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.notifier.sent, [])


class TestGuard(ApiTestCase):
    """require_admin: cookie or bearer token, then a fresh admin check against the store."""

    def setUp(self) -> None:
        super().setUp()
        self.admin = make_user(self.db)

    def _bearer(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def test_check_auth_with_cookie_from_login(self) -> None:
        self.login()
        resp = self.client.get("/api/check-auth")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"authenticated": True, "username": "admin"})

    def test_check_auth_with_bearer_header(self) -> None:
        token = self.login()
        self.client.cookies.clear()
        resp = self.client.get("/api/check-auth", headers=self._bearer(token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["username"], "admin")

    def test_cookie_takes_precedence_over_header(self) -> None:
        self.login()
        resp = self.client.get("/api/check-auth", headers=self._bearer("garbage"))
        self.assertEqual(resp.status_code, 200)

    def test_no_token(self) -> None:
        resp = self.client.get("/api/check-auth")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Unauthorized: No token provided"})

    def test_invalid_token(self) -> None:
        resp = self.client.get("/api/check-auth", headers=self._bearer("not.a.jwt"))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Unauthorized: Invalid token"})

    def test_token_valid_within_24_hours(self) -> None:
        issued = datetime.now(UTC) - timedelta(hours=23, minutes=59)
        token = create_session_token(self.admin.id, "admin", True, now=issued)
        resp = self.client.get("/api/check-auth", headers=self._bearer(token))
        self.assertEqual(resp.status_code, 200)

    def test_token_expires_after_24_hours(self) -> None:
        issued = datetime.now(UTC) - timedelta(hours=24, seconds=1)
        token = create_session_token(self.admin.id, "admin", True, now=issued)
        resp = self.client.get("/api/check-auth", headers=self._bearer(token))
        self.assertEqual(resp.status_code, 401)

    def test_revoked_admin_is_forbidden(self) -> None:
        token = self.login()
        self.client.cookies.clear()
        user = self.db.get(User, self.admin.id)
        user.is_admin = False
        self.db.commit()
        resp = self.client.get("/api/check-auth", headers=self._bearer(token))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json(), {"error": "Forbidden: Not an admin"})

    def test_token_flag_is_not_trusted(self) -> None:
        viewer = make_user(self.db, username="viewer", email="v@example.com", is_admin=False)
        token = create_session_token(viewer.id, "viewer", True)
        resp = self.client.get("/api/check-auth", headers=self._bearer(token))
        self.assertEqual(resp.status_code, 403)

    def test_deleted_user_is_forbidden(self) -> None:
        token = create_session_token("gone", "ghost", True)
        resp = self.client.get("/api/check-auth", headers=self._bearer(token))
        self.assertEqual(resp.status_code, 403)

    def test_guard_attaches_user_to_request_state(self) -> None:
        token = create_session_token(self.admin.id, "admin", True)
        request = SimpleNamespace(state=SimpleNamespace())
        current = require_admin(request, token, self.db)
        self.assertEqual(current.id, self.admin.id)
        self.assertEqual(request.state.user.id, self.admin.id)
        self.assertTrue(request.state.user.is_admin)

    def test_rejected_guard_leaves_request_state_empty(self) -> None:
        viewer = make_user(self.db, username="viewer", email="v@example.com", is_admin=False)
        request = SimpleNamespace(state=SimpleNamespace())
        with self.assertRaises(Forbidden):
            require_admin(request, create_session_token(viewer.id, "viewer", True), self.db)
        self.assertFalse(hasattr(request.state, "user"))

    def test_logout_clears_cookie_but_token_stays_valid(self) -> None:
        token = self.login()
        resp = self.client.post("/api/logout")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Logout successful"})
        self.assertIn("adminToken=", resp.headers["set-cookie"])
        self.assertNotIn("adminToken", self.client.cookies)

        self.assertEqual(self.client.get("/api/check-auth").status_code, 401)
        resp = self.client.get("/api/check-auth", headers=self._bearer(token))
        self.assertEqual(resp.status_code, 200)


if __name__ == "__main__":
    unittest.main()
