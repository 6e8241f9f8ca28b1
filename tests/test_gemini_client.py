import unittest
from unittest.mock import MagicMock, patch

import httpx
from google.genai import errors as genai_errors

from core.errors import AIQuotaError, AIServiceError, ConfigError
from core.gemini_client import GeminiClient


def api_error(cls, code, status):
    return cls(code, {"error": {"code": code, "message": f"{status} from test", "status": status}})


class TestGeminiClient(unittest.TestCase):

    def setUp(self):
        patcher = patch("core.gemini_client.genai.Client")
        self.mock_client_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.generate = self.mock_client_cls.return_value.models.generate_content
        self.client = GeminiClient("test-key", model_name="gemini-test", timeout_ms=5000)

    def test_requires_api_key(self):
        for key in ("", None):
            with self.subTest(key=key):
                with self.assertRaises(ConfigError):
                    GeminiClient(key)

    def test_timeout_is_passed_to_sdk(self):
        kwargs = self.mock_client_cls.call_args.kwargs
        self.assertEqual(kwargs["api_key"], "test-key")
        self.assertEqual(kwargs["http_options"].timeout, 5000)

    def test_generate_text(self):
        self.generate.return_value = MagicMock(text="Rewritten text")

        self.assertEqual(self.client.generate_text("prompt"), "Rewritten text")
        self.generate.assert_called_once_with(model="gemini-test", contents="prompt")

    def test_empty_response(self):
        self.generate.return_value = MagicMock(text=None)
        self.assertEqual(self.client.generate_text("prompt"), "")

    def test_quota_error(self):
        self.generate.side_effect = api_error(genai_errors.ClientError, 429, "RESOURCE_EXHAUSTED")
        with self.assertRaises(AIQuotaError) as ctx:
            self.client.generate_text("prompt")
        self.assertEqual(ctx.exception.status_code, 429)
        self.assertEqual(self.generate.call_count, 1)

    def test_credential_errors_are_config_errors(self):
        for code in (401, 403):
            with self.subTest(code=code):
                self.generate.side_effect = api_error(genai_errors.ClientError, code, "PERMISSION_DENIED")
                with self.assertRaises(ConfigError):
                    self.client.generate_text("prompt")

    def test_server_error(self):
        self.generate.side_effect = api_error(genai_errors.ServerError, 503, "UNAVAILABLE")
        with self.assertRaises(AIServiceError) as ctx:
            self.client.generate_text("prompt")
        self.assertNotIsInstance(ctx.exception, AIQuotaError)
        self.assertEqual(ctx.exception.details, {"status": 503})

    def test_timeout_is_a_service_error(self):
        self.generate.side_effect = httpx.ReadTimeout("timed out")
        with self.assertRaises(AIServiceError) as ctx:
            self.client.generate_text("prompt")
        self.assertEqual(ctx.exception.details, {"reason": "timeout"})
        self.assertIn("too long", ctx.exception.message)
        self.assertEqual(self.generate.call_count, 1)

    def test_connection_error_is_a_service_error(self):
        self.generate.side_effect = httpx.ConnectError("connection refused")
        with self.assertRaises(AIServiceError) as ctx:
            self.client.generate_text("prompt")
        self.assertEqual(ctx.exception.details, {"reason": "ConnectError"})


if __name__ == '__main__':
    unittest.main()
