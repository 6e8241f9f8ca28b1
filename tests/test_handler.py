import os
import tempfile
import unittest
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from backend.handler import User, app, get_current_user, get_workflow
from core.config import AppConfig
from core.models import Account
from core.resume_store import JsonFileResumeStore
from core.resume_workflow import ResumeWorkflow


class TestResumeApi(unittest.TestCase):
    """Endpoint tests against a JSON store; lifespan (Firebase init) is not run."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.store = JsonFileResumeStore(os.path.join(self.temp_dir.name, "resumes.json"))
        self.store.save_account(Account(id="user-1", name="Ann Lee", industry="Finance"))
        self.renderer = MagicMock(return_value=b"PK fake docx")
        self.gemini = MagicMock()
        self.workflow = ResumeWorkflow(self.store, AppConfig(gemini_api_key="test-key"),
                                       gemini_client=self.gemini, renderer=self.renderer)
        self.user = User(uid="user-1", email="ann@example.com", name="Ann Lee")

        app.dependency_overrides[get_workflow] = lambda: self.workflow
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.temp_dir.cleanup()

    def login(self):
        app.dependency_overrides[get_current_user] = lambda: self.user

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "Health OK"})

    def test_ai_status(self):
        response = self.client.get("/api/ai/status")
        self.assertEqual(response.json()["available"], True)

    def test_anonymous_load_returns_null(self):
        response = self.client.get("/api/resume")
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json())

    def test_anonymous_save_is_rejected(self):
        response = self.client.put("/api/resume", json={"content": "# Ann"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error_code"], "AUTH_ERROR")
        self.assertIsNone(self.store.find_by_owner("user-1"))

    def test_save_and_load(self):
        self.login()

        response = self.client.put("/api/resume", json={"content": "  # Ann\n\nHello  "})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["content"], "# Ann\n\nHello")
        self.assertEqual(response.json()["ownerId"], "user-1")

        response = self.client.get("/api/resume")
        self.assertEqual(response.json()["content"], "# Ann\n\nHello")

    def test_blank_content_is_validation_error(self):
        self.login()
        response = self.client.put("/api/resume", json={"content": "   "})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error_code"], "VALIDATION_ERROR")

    def test_improve(self):
        self.login()
        self.gemini.generate_text.return_value = "Managed a $2M portfolio."

        response = self.client.post("/api/resume/improve", json={"current": "managed money", "type": "experience"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["improved"], "Managed a $2M portfolio.")
        self.assertTrue(response.json()["success"])
        self.assertIn("Finance", self.gemini.generate_text.call_args[0][0])

    def test_improve_without_ai_backend(self):
        self.login()
        app.dependency_overrides[get_workflow] = lambda: ResumeWorkflow(self.store, AppConfig())

        response = self.client.post("/api/resume/improve", json={"current": "text", "type": "summary"})

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["error_code"], "CONFIG_ERROR")

    def test_assemble(self):
        response = self.client.post("/api/resume/assemble",
                                    json={"formState": {"summary": "Built X"}, "displayName": "Ann"})
        self.assertEqual(response.status_code, 200)
        self.assertIn("## Professional Summary\n\nBuilt X", response.json()["content"])

    def test_export_requires_login(self):
        response = self.client.post("/api/resume/export?format=docx", json={"formState": {}})
        self.assertEqual(response.status_code, 401)
        self.renderer.assert_not_called()

    def test_export_docx(self):
        self.login()

        response = self.client.post("/api/resume/export?format=docx",
                                    json={"formState": {"summary": "Built X"}})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b"PK fake docx")
        self.assertIn("wordprocessingml", response.headers["content-type"])
        disposition = response.headers["content-disposition"]
        self.assertIn('attachment; filename="Ann_Lee_', disposition)
        self.assertTrue(disposition.endswith('.docx"'))
        form_state, display_name, fmt = self.renderer.call_args[0]
        self.assertEqual(form_state.summary, "Built X")
        self.assertEqual(display_name, "Ann Lee")
        self.assertEqual(fmt, "docx")

    def test_export_rejects_unknown_format(self):
        self.login()
        response = self.client.post("/api/resume/export?format=html", json={"formState": {}})
        self.assertEqual(response.status_code, 422)

    def test_bearer_token_is_verified(self):
        self.workflow.save("user-1", "Saved resume")
        with patch("backend.handler.auth.verify_id_token", return_value={"uid": "user-1"}) as verify:
            response = self.client.get("/api/resume", headers={"Authorization": "Bearer good-token"})

        verify.assert_called_once_with("good-token")
        self.assertEqual(response.json()["content"], "Saved resume")

    def test_invalid_token_is_anonymous(self):
        with patch("backend.handler.auth.verify_id_token", side_effect=ValueError("expired")):
            response = self.client.put("/api/resume", json={"content": "x"},
                                       headers={"Authorization": "Bearer bad-token"})
        self.assertEqual(response.status_code, 401)


if __name__ == '__main__':
    unittest.main()
