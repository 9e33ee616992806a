"""Percona Platform client for sending telemetry reports."""

import json
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .http_client import get_default_headers
from .logging_config import logger

DEFAULT_PLATFORM_URL = "https://check.percona.com/v1/telemetry/GenericReport"

# Request timeout in seconds
UPLOAD_TIMEOUT = 60
DEFAULT_RETRY_COUNT = 5
DEFAULT_RESEND_INTERVAL = 60


@dataclass
class UploadResult:
    """
    Result of a telemetry upload.

    Attributes:
        success: Whether the platform accepted the report
        attempts: Number of requests made
        status_code: HTTP status of the last response, if any
        error_message: Error message if upload failed
    """

    success: bool
    attempts: int
    status_code: Optional[int] = None
    error_message: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate result state."""
        if self.success and self.error_message:
            raise ValueError("Successful result should not have error_message")
        if not self.success and not self.error_message:
            raise ValueError("Failed result must have error_message")

    @classmethod
    def success_result(cls, attempts: int, status_code: int) -> "UploadResult":
        """Create a successful upload result."""
        return cls(success=True, attempts=attempts, status_code=status_code)

    @classmethod
    def failure_result(cls, attempts: int, error_message: str, status_code: Optional[int] = None) -> "UploadResult":
        """Create a failed upload result."""
        return cls(success=False, attempts=attempts, status_code=status_code, error_message=error_message)


def _is_retryable_status(status_code: int) -> bool:
    return status_code == 408 or status_code >= 500


class PlatformClient:
    """
    HTTP client for the Percona Platform telemetry endpoint.

    Requests failing with a connection error, HTTP 408 or a 5xx status are
    retried after the resend interval. Waiting between attempts is cut short
    when the stop event is set.
    """

    def __init__(
        self,
        url: str = DEFAULT_PLATFORM_URL,
        resend_interval: float = DEFAULT_RESEND_INTERVAL,
        retry_count: int = DEFAULT_RETRY_COUNT,
        stop_event: Optional[threading.Event] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._url = url
        self._resend_interval = resend_interval
        self._retry_count = retry_count
        self._stop_event = stop_event or threading.Event()
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return self._url

    def send_telemetry(self, report: Dict[str, Any]) -> UploadResult:
        """
        Send one report request.

        Args:
            report: Report request body (see report.build_report)

        Returns:
            UploadResult describing the outcome
        """
        body = json.dumps(report)
        headers = get_default_headers(content_type="application/json")

        attempts = 0
        last_error = "no request made"
        last_status: Optional[int] = None
        while attempts <= self._retry_count:
            if attempts > 0:
                logger.info(f"Retrying telemetry upload in {self._resend_interval}s (attempt {attempts + 1})")
                if self._stop_event.wait(self._resend_interval):
                    return UploadResult.failure_result(attempts, "upload cancelled", last_status)
            attempts += 1

            try:
                response = self._session.post(self._url, data=body, headers=headers, timeout=UPLOAD_TIMEOUT)
            except requests.exceptions.ConnectionError:
                last_error = "Failed to connect to Percona Platform"
                logger.warning(last_error)
                continue
            except requests.exceptions.Timeout:
                last_error = "Telemetry upload timed out"
                logger.warning(last_error)
                continue

            last_status = response.status_code
            if response.ok:
                logger.info("Telemetry report sent to Percona Platform")
                return UploadResult.success_result(attempts, response.status_code)

            last_error = f"Failed to send telemetry report. [{response.status_code}]"
            try:
                response_json = response.json()
                if isinstance(response_json, dict) and "message" in response_json:
                    last_error += f" - {response_json['message']}"
            except ValueError:
                pass
            logger.warning(last_error)

            if not _is_retryable_status(response.status_code):
                break

        return UploadResult.failure_result(attempts, last_error, last_status)
