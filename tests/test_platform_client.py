"""Tests for the Percona Platform client."""

import json
import threading
import unittest
from unittest.mock import MagicMock, Mock

import requests

from telemetry_agent.platform_client import UPLOAD_TIMEOUT, PlatformClient, UploadResult

REPORT = {"reports": [{"id": "1", "instanceId": "abc", "metrics": []}]}


def _response(status_code, body=None):
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    if body is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = body
    return response


class TestPlatformClient(unittest.TestCase):
    """Tests for PlatformClient.send_telemetry."""

    def setUp(self):
        self.session = MagicMock(spec=requests.Session)

    def _client(self, **kwargs):
        kwargs.setdefault("resend_interval", 0)
        return PlatformClient(url="https://check.example.com/v1/telemetry/GenericReport", session=self.session, **kwargs)

    def test_success(self):
        self.session.post.return_value = _response(200, {})

        result = self._client().send_telemetry(REPORT)

        self.assertTrue(result.success)
        self.assertEqual(result.attempts, 1)
        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], "https://check.example.com/v1/telemetry/GenericReport")
        self.assertEqual(json.loads(kwargs["data"]), REPORT)
        self.assertEqual(kwargs["headers"]["Content-Type"], "application/json")
        self.assertIn("percona-telemetry-agent/", kwargs["headers"]["User-Agent"])
        self.assertEqual(kwargs["timeout"], UPLOAD_TIMEOUT)

    def test_server_error_is_retried(self):
        self.session.post.side_effect = [_response(503), _response(502), _response(200)]

        result = self._client().send_telemetry(REPORT)

        self.assertTrue(result.success)
        self.assertEqual(result.attempts, 3)

    def test_connection_error_is_retried(self):
        self.session.post.side_effect = [requests.exceptions.ConnectionError("refused"), _response(200)]

        result = self._client().send_telemetry(REPORT)

        self.assertTrue(result.success)
        self.assertEqual(result.attempts, 2)

    def test_retries_are_bounded(self):
        self.session.post.return_value = _response(500, {"message": "internal"})

        result = self._client(retry_count=5).send_telemetry(REPORT)

        self.assertFalse(result.success)
        self.assertEqual(result.attempts, 6)
        self.assertEqual(result.status_code, 500)
        self.assertIn("internal", result.error_message)

    def test_client_error_is_not_retried(self):
        self.session.post.return_value = _response(400, {"message": "invalid report"})

        result = self._client().send_telemetry(REPORT)

        self.assertFalse(result.success)
        self.assertEqual(result.attempts, 1)
        self.assertIn("[400]", result.error_message)
        self.assertIn("invalid report", result.error_message)

    def test_request_timeout_status_is_retried(self):
        self.session.post.side_effect = [_response(408), _response(204)]
        result = self._client().send_telemetry(REPORT)
        self.assertTrue(result.success)
        self.assertEqual(result.status_code, 204)

    def test_stop_event_cancels_retry_wait(self):
        stop_event = threading.Event()
        stop_event.set()
        self.session.post.return_value = _response(503)

        result = self._client(resend_interval=60, stop_event=stop_event).send_telemetry(REPORT)

        self.assertFalse(result.success)
        self.assertEqual(result.attempts, 1)
        self.assertEqual(result.error_message, "upload cancelled")


class TestUploadResult(unittest.TestCase):
    def test_failure_requires_message(self):
        with self.assertRaises(ValueError):
            UploadResult(success=False, attempts=1)

    def test_success_rejects_message(self):
        with self.assertRaises(ValueError):
            UploadResult(success=True, attempts=1, error_message="oops")
