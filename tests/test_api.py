"""HTTP-level tests: the full app on in-memory SQLite with mock email and a temp upload dir."""

import tempfile
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from app.core.exceptions import StorageError
from app.main import create_app

from helpers import TEST_PASSWORD, add_user, make_settings

API = "/api/v1"


class ApiTestCase(unittest.TestCase):
    settings_overrides: dict = {}

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.settings = make_settings(UPLOAD_DIR=self._tmp.name, **self.settings_overrides)
        self.app = create_app(self.settings)
        self.client = TestClient(self.app)
        self.client.__enter__()
        self.addCleanup(self.client.__exit__, None, None, None)

    def add_user(self, email: str = "alice@example.com", **kwargs):
        db = self.app.state.session_factory()
        try:
            user = add_user(db, email, **kwargs)
            return user.id
        finally:
            db.close()

    def login(self, email: str = "alice@example.com", password: str = TEST_PASSWORD) -> dict:
        response = self.client.post(f"{API}/auth/login", json={"email": email, "password": password})
        self.assertEqual(response.status_code, 200, response.text)
        return {"Authorization": f"Bearer {response.json()['data']['accessToken']}"}

    def assert_error(self, response, status_code: int, code: str) -> dict:
        self.assertEqual(response.status_code, status_code, response.text)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["error"]["code"], code)
        self.assertIn("timestamp", body["meta"])
        return body["error"]


class TestEnvelope(ApiTestCase):
    def test_root(self) -> None:
        self.assertEqual(self.client.get("/").json(), {"message": "Keyhold API"})

    def test_health(self) -> None:
        response = self.client.get(f"{API}/health", headers={"X-Request-ID": "req-123"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"], {"status": "ok", "environment": "dev"})
        self.assertEqual(body["meta"]["requestId"], "req-123")
        self.assertEqual(response.headers["X-Request-ID"], "req-123")
        self.assertEqual(response.headers["X-Frame-Options"], "DENY")
        self.assertEqual(response.headers["X-Content-Type-Options"], "nosniff")

    def test_generated_request_id(self) -> None:
        response = self.client.get(f"{API}/health")
        self.assertEqual(response.json()["meta"]["requestId"], response.headers["X-Request-ID"])

    def test_readiness(self) -> None:
        response = self.client.get(f"{API}/health/ready")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["checks"], {"database": "ok"})

    def test_readiness_when_database_down(self) -> None:
        with patch("app.api.v1.health.check_db_connected", return_value=False):
            response = self.client.get(f"{API}/health/ready")
        error = self.assert_error(response, 503, "NOT_READY")
        self.assertEqual(error["message"], "Database is not reachable")

    def test_unknown_route(self) -> None:
        error = self.assert_error(self.client.get(f"{API}/nope"), 404, "NOT_FOUND")
        self.assertEqual(error["message"], "Resource not found")

    def test_validation_details(self) -> None:
        response = self.client.post(f"{API}/auth/register", json={"email": "not-an-email", "password": "short"})
        error = self.assert_error(response, 400, "VALIDATION_ERROR")
        self.assertEqual(error["message"], "Validation failed")
        fields = {d["field"] for d in error["details"]}
        self.assertEqual(fields, {"email", "password"})
        email_detail = next(d for d in error["details"] if d["field"] == "email")
        self.assertEqual(email_detail["message"], "must be a valid email address")


class TestAuthFlow(ApiTestCase):
    def test_register_login_refresh_logout(self) -> None:
        response = self.client.post(
            f"{API}/auth/register",
            json={"email": "bob@example.com", "password": "password123", "name": "Bob"},
        )
        self.assertEqual(response.status_code, 201, response.text)
        data = response.json()["data"]
        self.assertEqual(data["user"]["email"], "bob@example.com")
        self.assertNotIn("passwordHash", data["user"])
        self.assertEqual(data["expiresIn"], 900)
        set_cookie = response.headers["set-cookie"]
        self.assertIn("refresh_token=", set_cookie)
        self.assertIn("HttpOnly", set_cookie)
        self.assertIn("Path=/", set_cookie)
        self.assertIn("SameSite=lax", set_cookie)

        self.assert_error(
            self.client.post(f"{API}/auth/login", json={"email": "bob@example.com", "password": "wrong-pass"}),
            401,
            "INVALID_CREDENTIALS",
        )

        headers = self.login("bob@example.com", "password123")
        refresh_token = self.client.cookies.get("refresh_token")
        self.assertTrue(refresh_token)

        me = self.client.get(f"{API}/auth/me", headers=headers)
        self.assertEqual(me.json()["data"]["name"], "Bob")

        refreshed = self.client.post(f"{API}/auth/refresh")
        self.assertEqual(refreshed.status_code, 200, refreshed.text)
        new_access = refreshed.json()["data"]["accessToken"]
        self.assertEqual(
            self.client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {new_access}"}).status_code,
            200,
        )

        logout = self.client.post(f"{API}/auth/logout")
        self.assertEqual(logout.json()["data"]["message"], "Logged out successfully")
        self.assertIsNone(self.client.cookies.get("refresh_token"))

        # The revoked token is rejected server-side too
        replay = self.client.post(f"{API}/auth/refresh", headers={"Cookie": f"refresh_token={refresh_token}"})
        error = self.assert_error(replay, 401, "INVALID_REFRESH_TOKEN")
        self.assertEqual(error["message"], "Invalid or expired refresh token")
        self.assertIn("refresh_token=", replay.headers["set-cookie"])

    def test_duplicate_registration(self) -> None:
        self.add_user("taken@example.com")
        response = self.client.post(
            f"{API}/auth/register", json={"email": "taken@example.com", "password": "password123"}
        )
        self.assert_error(response, 409, "USER_EXISTS")

    def test_refresh_without_cookie(self) -> None:
        error = self.assert_error(self.client.post(f"{API}/auth/refresh"), 401, "NO_REFRESH_TOKEN")
        self.assertEqual(error["message"], "No refresh token provided")

    def test_logout_without_cookie_succeeds(self) -> None:
        self.assertEqual(self.client.post(f"{API}/auth/logout").status_code, 200)

    def test_me_requires_token(self) -> None:
        response = self.client.get(f"{API}/auth/me")
        error = self.assert_error(response, 401, "UNAUTHORIZED")
        self.assertEqual(error["message"], "Not authenticated")
        self.assertEqual(response.headers["WWW-Authenticate"], "Bearer")
        self.assert_error(
            self.client.get(f"{API}/auth/me", headers={"Authorization": "Bearer garbage"}), 401, "UNAUTHORIZED"
        )

    def test_deactivated_user_token_rejected(self) -> None:
        user_id = self.add_user()
        headers = self.login()
        self.add_user("root@example.com", role="admin")
        admin_headers = self.login("root@example.com")
        self.client.put(f"{API}/admin/users/{user_id}", json={"isActive": False}, headers=admin_headers)
        self.assert_error(self.client.get(f"{API}/auth/me", headers=headers), 401, "UNAUTHORIZED")

    def test_profile_and_change_password(self) -> None:
        self.add_user()
        headers = self.login()

        profile = self.client.put(f"{API}/auth/profile", json={"name": "Alice Liddell"}, headers=headers)
        self.assertEqual(profile.json()["data"]["name"], "Alice Liddell")

        wrong = self.client.put(
            f"{API}/auth/change-password",
            json={"currentPassword": "not-it", "newPassword": "new-password-1"},
            headers=headers,
        )
        self.assert_error(wrong, 400, "INVALID_PASSWORD")

        changed = self.client.put(
            f"{API}/auth/change-password",
            json={"currentPassword": TEST_PASSWORD, "newPassword": "new-password-1"},
            headers=headers,
        )
        self.assertEqual(changed.json()["data"]["message"], "Password changed successfully")
        self.login(password="new-password-1")


class TestPasswordResetFlow(ApiTestCase):
    def test_forgot_validate_reset(self) -> None:
        self.add_user()
        old_headers = self.login()
        sender = self.app.state.email_sender

        for email in ("alice@example.com", "nobody@example.com"):
            response = self.client.post(f"{API}/auth/forgot-password", json={"email": email})
            self.assertEqual(response.status_code, 200)
            self.assertEqual(
                response.json()["data"]["message"],
                "If an account with that email exists, a password reset link has been sent.",
            )
        self.assertEqual(len(sender.sent_mails), 1)
        body = sender.get_last_email().body
        token = body.split("?token=", 1)[1].split()[0]

        valid = self.client.post(f"{API}/auth/validate-reset-token", json={"token": token})
        self.assertEqual(valid.json()["data"], {"valid": True, "email": "alice@example.com"})

        reset = self.client.post(
            f"{API}/auth/reset-password", json={"token": token, "newPassword": "reset-password-1"}
        )
        self.assertEqual(reset.status_code, 200, reset.text)

        again = self.client.post(
            f"{API}/auth/reset-password", json={"token": token, "newPassword": "reset-password-2"}
        )
        error = self.assert_error(again, 400, "INVALID_TOKEN")
        self.assertEqual(error["message"], "Invalid or expired reset token")

        # Sessions from before the reset are gone
        self.assert_error(self.client.post(f"{API}/auth/refresh"), 401, "INVALID_REFRESH_TOKEN")
        self.assertEqual(self.client.get(f"{API}/auth/me", headers=old_headers).status_code, 200)
        self.login(password="reset-password-1")

    def test_invalid_token(self) -> None:
        response = self.client.post(f"{API}/auth/validate-reset-token", json={"token": "f" * 64})
        self.assert_error(response, 400, "INVALID_TOKEN")


class TestUploads(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.add_user()
        self.headers = self.login()

    def test_requires_auth(self) -> None:
        response = self.client.post(f"{API}/upload", files={"file": ("a.png", b"png", "image/png")})
        self.assert_error(response, 401, "UNAUTHORIZED")

    def test_single_upload_is_served(self) -> None:
        response = self.client.post(
            f"{API}/upload", files={"file": ("cat.png", b"\x89PNG-bytes", "image/png")}, headers=self.headers
        )
        self.assertEqual(response.status_code, 201, response.text)
        stored = response.json()["data"]["file"]
        self.assertEqual(stored["originalName"], "cat.png")
        self.assertEqual(stored["contentType"], "image/png")
        self.assertEqual(stored["size"], 10)
        self.assertTrue(stored["url"].startswith("/uploads/"))

        served = self.client.get(stored["url"])
        self.assertEqual(served.status_code, 200)
        self.assertEqual(served.content, b"\x89PNG-bytes")

        deleted = self.client.delete(f"{API}/upload/{stored['key']}", headers=self.headers)
        self.assertEqual(deleted.json()["data"]["message"], "File deleted successfully")
        self.assertEqual(self.client.get(stored["url"]).status_code, 404)

    def test_rejected_type(self) -> None:
        response = self.client.post(
            f"{API}/upload", files={"file": ("page.html", b"<html>", "text/html")}, headers=self.headers
        )
        error = self.assert_error(response, 400, "UPLOAD_ERROR")
        self.assertIn("file type not allowed", error["message"])

    def test_missing_file(self) -> None:
        response = self.client.post(f"{API}/upload", data={"other": "x"}, headers=self.headers)
        error = self.assert_error(response, 400, "VALIDATION_ERROR")
        self.assertEqual(error["message"], "No file provided")

    def test_multiple_partial_success(self) -> None:
        with self.assertLogs("app.api.v1.upload", level="WARNING") as logs:
            response = self.client.post(
                f"{API}/upload/multiple",
                files=[
                    ("files", ("a.png", b"a", "image/png")),
                    ("files", ("b.exe", b"b", "image/png")),
                    ("files", ("c.pdf", b"%PDF", "application/pdf")),
                ],
                headers=self.headers,
            )
        self.assertEqual(response.status_code, 201, response.text)
        data = response.json()["data"]
        self.assertEqual([u["filename"] for u in data["uploaded"]], ["a.png", "c.pdf"])
        self.assertEqual(data["errors"], [{"filename": "b.exe", "error": "file extension not allowed: .exe"}])
        self.assertEqual([r.upload_filename for r in logs.records], ["b.exe"])

    def test_too_many_files(self) -> None:
        files = [("files", (f"{i}.png", b"x", "image/png")) for i in range(11)]
        response = self.client.post(f"{API}/upload/multiple", files=files, headers=self.headers)
        error = self.assert_error(response, 400, "VALIDATION_ERROR")
        self.assertEqual(error["message"], "Too many files (max: 10)")


class TestAdmin(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.add_user("root@example.com", role="admin", name="Root")
        self.admin = self.login("root@example.com")
        self.user_id = self.add_user("alice@example.com")

    def test_non_admin_forbidden(self) -> None:
        headers = self.login("alice@example.com")
        for path in ("dashboard", "users", "settings", "files"):
            with self.subTest(path=path):
                error = self.assert_error(self.client.get(f"{API}/admin/{path}", headers=headers), 403, "FORBIDDEN")
                self.assertEqual(error["message"], "Admin access required")
        self.assert_error(self.client.get(f"{API}/admin/users"), 401, "UNAUTHORIZED")

    def test_dashboard(self) -> None:
        data = self.client.get(f"{API}/admin/dashboard", headers=self.admin).json()["data"]
        self.assertEqual((data["totalUsers"], data["adminUsers"], data["newUsersToday"]), (2, 1, 2))
        self.assertEqual(len(data["recentUsers"]), 2)
        self.assertEqual(data["recentActivity"][0]["type"], "info")

    def test_user_crud(self) -> None:
        listing = self.client.get(
            f"{API}/admin/users",
            params={"pageSize": 500, "sortBy": "bogus", "sortDir": "asc", "search": "alice"},
            headers=self.admin,
        ).json()["data"]
        self.assertEqual(listing["pageSize"], 10)
        self.assertEqual([u["email"] for u in listing["items"]], ["alice@example.com"])

        created = self.client.post(
            f"{API}/admin/users",
            json={"email": "carol@example.com", "password": "password123", "role": "admin"},
            headers=self.admin,
        )
        self.assertEqual(created.status_code, 201, created.text)
        carol_id = created.json()["data"]["id"]

        conflict = self.client.post(
            f"{API}/admin/users",
            json={"email": "carol@example.com", "password": "password123"},
            headers=self.admin,
        )
        self.assertEqual(self.assert_error(conflict, 409, "CONFLICT")["message"], "Email already exists")

        updated = self.client.put(f"{API}/admin/users/{carol_id}", json={"name": "Carol"}, headers=self.admin)
        self.assertEqual(updated.json()["data"]["name"], "Carol")

        self.assertEqual(
            self.client.delete(f"{API}/admin/users/{carol_id}", headers=self.admin).json()["data"]["message"],
            "User deleted successfully",
        )
        self.assert_error(self.client.get(f"{API}/admin/users/{carol_id}", headers=self.admin), 404, "NOT_FOUND")

        admins = self.client.get(f"{API}/admin/users", params={"role": "admin"}, headers=self.admin).json()["data"]
        self.assertEqual(admins["total"], 1)

    def test_settings(self) -> None:
        listing = self.client.get(f"{API}/admin/settings", headers=self.admin).json()["data"]
        self.assertEqual(len(listing), 5)
        self.assertEqual(listing[0]["group"], "auth")

        group = self.client.get(f"{API}/admin/settings", params={"group": "general"}, headers=self.admin)
        self.assertEqual([s["key"] for s in group.json()["data"]], ["app_description", "app_name", "maintenance_mode"])

        one = self.client.put(f"{API}/admin/settings/app_name", json={"value": "Keyhold"}, headers=self.admin)
        self.assertEqual(one.json()["data"]["value"], "Keyhold")
        self.assertEqual(
            self.client.get(f"{API}/admin/settings/app_name", headers=self.admin).json()["data"]["value"],
            "Keyhold",
        )

        bad = self.client.put(
            f"{API}/admin/settings",
            json={"settings": [{"key": "app_name", "value": "X"}, {"key": "nope", "value": "1"}]},
            headers=self.admin,
        )
        self.assert_error(bad, 404, "NOT_FOUND")
        self.assertEqual(
            self.client.get(f"{API}/admin/settings/app_name", headers=self.admin).json()["data"]["value"],
            "Keyhold",
        )

        batch = self.client.put(
            f"{API}/admin/settings",
            json={"settings": [{"key": "maintenance_mode", "value": "true"}]},
            headers=self.admin,
        )
        self.assertEqual(batch.status_code, 200, batch.text)
        self.assert_error(self.client.get(f"{API}/admin/settings/missing", headers=self.admin), 404, "NOT_FOUND")

    def test_files(self) -> None:
        user_headers = self.login("alice@example.com")
        stored = self.client.post(
            f"{API}/upload", files={"file": ("doc.pdf", b"%PDF-1.7", "application/pdf")}, headers=user_headers
        ).json()["data"]["file"]
        top = stored["key"].split("/", 1)[0]

        root = self.client.get(f"{API}/admin/files", headers=self.admin).json()["data"]
        self.assertEqual([(f["name"], f["isDir"]) for f in root["files"]], [(top, True)])

        directory = stored["key"].rsplit("/", 1)[0]
        inner = self.client.get(f"{API}/admin/files", params={"dir": directory}, headers=self.admin).json()["data"]
        self.assertEqual(inner["currentDir"], directory)
        self.assertEqual(inner["files"][0]["mimeType"], "application/pdf")
        self.assertEqual(inner["totalSize"], 8)

        self.assert_error(
            self.client.get(f"{API}/admin/files", params={"dir": "../"}, headers=self.admin), 400, "VALIDATION_ERROR"
        )
        self.client.delete(f"{API}/admin/files/{stored['key']}", headers=self.admin)
        self.assert_error(
            self.client.delete(f"{API}/admin/files/{stored['key']}", headers=self.admin), 404, "NOT_FOUND"
        )


class StorageFailureTestCase(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.add_user()
        self.headers = self.login()

    def upload_with_failing_storage(self):
        failure = StorageError("Failed to write file: [Errno 13] Permission denied: '/srv/uploads/a.png'")
        storage = self.app.state.upload_service.storage
        with patch.object(storage, "upload", side_effect=failure):
            with self.assertLogs("app.core.errors", level="ERROR"):
                return self.client.post(
                    f"{API}/upload", files={"file": ("a.png", b"png", "image/png")}, headers=self.headers
                )


class TestStorageFailureInDev(StorageFailureTestCase):
    def test_message_is_shown(self) -> None:
        error = self.assert_error(self.upload_with_failing_storage(), 500, "STORAGE_ERROR")
        self.assertIn("Permission denied", error["message"])


class TestStorageFailureInProduction(StorageFailureTestCase):
    settings_overrides = {"APP_ENV": "prod"}

    def test_message_is_generic(self) -> None:
        response = self.upload_with_failing_storage()
        error = self.assert_error(response, 500, "STORAGE_ERROR")
        self.assertEqual(error["message"], "Internal server error")
        self.assertNotIn("/srv/uploads", response.text)


if __name__ == "__main__":
    unittest.main()
