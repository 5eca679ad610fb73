import unittest

import httpx

from llm_gateway.classifier import classify_exception, classify_status
from llm_gateway.errors import Cancelled, FallbackFailed, PaymentRequired, RateLimited


class ClassifyStatusTests(unittest.TestCase):
    def test_429_is_rate_limited_regardless_of_body(self) -> None:
        for body in ("", "quota", '{"error": {"code": 402}}'):
            err = classify_status(429, body)
            self.assertIsInstance(err, RateLimited)
            self.assertTrue(err.retryable)
            self.assertEqual(err.kind, "rate_limited")

    def test_402_is_payment_required(self) -> None:
        err = classify_status(402, "no credits")
        self.assertIsInstance(err, PaymentRequired)
        self.assertFalse(err.retryable)
        self.assertIn("no credits", str(err))

    def test_other_status_is_fallback_failed_with_snippet(self) -> None:
        err = classify_status(500, "x" * 1000)
        self.assertIsInstance(err, FallbackFailed)
        self.assertEqual(err.status_code, 500)
        self.assertIsNotNone(err.detail)
        self.assertLessEqual(len(err.detail), 203)
        self.assertIn("500", err.detail)


class ClassifyExceptionTests(unittest.TestCase):
    def test_transport_error_is_fallback_failed(self) -> None:
        err = classify_exception(httpx.ConnectError("connection refused"))
        self.assertIsInstance(err, FallbackFailed)
        self.assertIn("connection refused", str(err))

    def test_gateway_errors_pass_through(self) -> None:
        original = Cancelled("deadline exceeded")
        self.assertIs(classify_exception(original), original)


if __name__ == "__main__":
    unittest.main()
