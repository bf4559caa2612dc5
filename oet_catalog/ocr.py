"""
Azure AI Document Intelligence "prebuilt-read" over plain REST (requests).

analyze is a long-running operation: POST returns 202 with an Operation-Location header,
which is polled until status is "succeeded" or "failed".
"""
import base64
import logging
import time
from typing import Callable, Optional

import requests

from oet_catalog.config import OcrSettings

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


class RecognitionError(RuntimeError):
    """Structured error reported by the recognition service (or a poll that never finished)."""

    def __init__(self, code: str, message: str):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message

    @classmethod
    def from_payload(cls, payload: Optional[dict], fallback: str) -> "RecognitionError":
        error = (payload or {}).get("error") or {}
        return cls(error.get("code") or fallback, error.get("message") or "no error message returned")


def first_line(text: Optional[str]) -> str:
    """First non-empty line of recognized text, stripped. Empty string if there is none."""
    for line in (text or "").splitlines():
        line = line.strip()
        if line:
            return line
    return ""


def _json_or_none(response: requests.Response) -> Optional[dict]:
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


class DocumentIntelligenceClient:
    def __init__(
        self,
        settings: OcrSettings,
        session: Optional[requests.Session] = None,
        poll_interval: float = 1.0,
        timeout: float = 120.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.session = session or requests.Session()
        self.session.headers.update({"Ocp-Apim-Subscription-Key": settings.key})
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._sleep = sleep

    @property
    def analyze_url(self) -> str:
        s = self.settings
        return f"{s.endpoint}/documentintelligence/documentModels/{s.model_id}:analyze?api-version={s.api_version}"

    def analyze_url_source(self, url: str) -> str:
        """Recognized text of the image at a publicly reachable URL."""
        return self._analyze({"urlSource": url})

    def analyze_bytes(self, data: bytes) -> str:
        """Recognized text of an image uploaded inline."""
        return self._analyze({"base64Source": base64.b64encode(data).decode("ascii")})

    def _analyze(self, body: dict) -> str:
        response = self.session.post(self.analyze_url, json=body, timeout=REQUEST_TIMEOUT)
        if response.status_code != 202:
            raise RecognitionError.from_payload(_json_or_none(response), f"HTTP{response.status_code}")
        operation_url = response.headers.get("Operation-Location")
        if not operation_url:
            raise RecognitionError("MissingOperationLocation", "analyze response had no Operation-Location header")
        result = self._poll(operation_url)
        return (result.get("analyzeResult") or {}).get("content") or ""

    def _poll(self, operation_url: str) -> dict:
        waited = 0.0
        while True:
            response = self.session.get(operation_url, timeout=REQUEST_TIMEOUT)
            payload = _json_or_none(response)
            if response.status_code != 200 or payload is None:
                raise RecognitionError.from_payload(payload, f"HTTP{response.status_code}")
            status = (payload.get("status") or "").lower()
            if status == "succeeded":
                return payload
            if status == "failed":
                raise RecognitionError.from_payload(payload, "AnalyzeFailed")
            if waited >= self.timeout:
                raise RecognitionError("PollTimeout", f"operation still '{status}' after {waited:.0f}s")
            delay = self._retry_after(response)
            logger.debug("Analyze status %s, polling again in %.1fs", status, delay)
            self._sleep(delay)
            waited += delay

    def _retry_after(self, response: requests.Response) -> float:
        value = response.headers.get("Retry-After")
        try:
            return max(float(value), 0.0) if value is not None else self.poll_interval
        except ValueError:
            return self.poll_interval
