import tempfile
import unittest

from fastapi.testclient import TestClient

from backend.config import Settings
from backend.database import Database
from backend.main import create_app

TEST_SECRET = "test-secret"


class ApiTestCase(unittest.TestCase):
    """Runs the app against a throwaway SQLite file per test."""

    def setUp(self) -> None:
        self._tmpdir = tempfile.TemporaryDirectory()
        self.settings = Settings(
            database_url=f"sqlite:///{self._tmpdir.name}/test.db",
            jwt_secret=TEST_SECRET,
        )
        self.database = Database(self.settings.database_url)
        self.database.init()
        self.client = TestClient(create_app(self.settings, self.database))

    def tearDown(self) -> None:
        self.client.close()
        self.database.dispose()
        self._tmpdir.cleanup()

    def register(self, email: str = "alice@example.com", password: str = "s3cret") -> tuple[int, dict]:
        response = self.client.post(
            "/api/auth/register",
            json={"name": email.split("@")[0], "email": email, "password": password},
        )
        self.assertEqual(response.status_code, 201, response.text)
        body = response.json()
        return body["user"]["id"], {"Authorization": f"Bearer {body['token']}"}

    def add_transaction(self, headers: dict, **fields) -> dict:
        payload = {"type": "expense", "category": "Food", "amount": 10}
        payload.update(fields)
        response = self.client.post("/api/transactions", json=payload, headers=headers)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()
