import unittest

from core.errors import (
    AIQuotaError,
    AIServiceError,
    AuthError,
    ConfigError,
    EmptyResultError,
    NotFoundError,
    RenderError,
    ResumeBuilderError,
    StoreError,
    ValidationError,
)


class TestErrors(unittest.TestCase):

    def test_status_codes(self):
        expected = [
            (AuthError(), 401, "AUTH_ERROR"),
            (NotFoundError("User"), 404, "NOT_FOUND"),
            (ValidationError("bad"), 400, "VALIDATION_ERROR"),
            (ConfigError(), 503, "CONFIG_ERROR"),
            (EmptyResultError(), 502, "EMPTY_RESULT"),
            (AIServiceError(), 502, "AI_SERVICE_ERROR"),
            (AIQuotaError(), 429, "AI_QUOTA_EXCEEDED"),
            (RenderError("boom"), 500, "RENDER_ERROR"),
            (StoreError(), 500, "STORE_ERROR"),
        ]
        for error, status, code in expected:
            with self.subTest(error=type(error).__name__):
                self.assertIsInstance(error, ResumeBuilderError)
                self.assertEqual(error.status_code, status)
                self.assertEqual(error.error_code, code)

    def test_messages(self):
        self.assertEqual(NotFoundError("User").message, "User not found")
        self.assertEqual(ValidationError("is required", field="content").message,
                         "Validation error for field 'content': is required")
        self.assertEqual(RenderError("boom").message, "Failed to generate document: boom")
        self.assertEqual(str(AuthError()), "Please log in to continue")

    def test_quota_is_a_service_error(self):
        self.assertIsInstance(AIQuotaError(), AIServiceError)

    def test_to_dict(self):
        error = ValidationError("bad", details={"limit": 3})
        self.assertEqual(error.to_dict(), {
            "error": "bad",
            "error_code": "VALIDATION_ERROR",
            "details": {"limit": 3},
        })
        self.assertEqual(ConfigError().to_dict()["details"], {})


if __name__ == '__main__':
    unittest.main()
