"""Google generative-language (Gemini) REST client for deal narratives.

Calls the generateContent endpoint over plain requests rather than the
google-generativeai SDK, so the HTTP status of a failure is available to
classify it (auth, quota, transport) without importing SDK exception types.
"""

import logging
import requests

from config import GEMINI_MODEL, GEMINI_TIMEOUT
from errors import (
    UpstreamError, UpstreamAuthError, UpstreamQuotaError, UpstreamSafetyRejection,
    UpstreamShapeError, UpstreamTransportError,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

GENERATION_CONFIG = {
    "temperature": 0.7,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 2048,
}

SAFETY_FINISH_REASONS = {"SAFETY", "BLOCKLIST", "PROHIBITED_CONTENT", "SPII"}


def _error_details(resp) -> str:
    try:
        payload = resp.json()
        return str(payload.get("error", {}).get("message") or payload)[:500]
    except ValueError:
        return resp.text[:500]


def classify_http_error(resp) -> UpstreamError:
    """Map a non-2xx upstream response to an error kind."""
    details = _error_details(resp)
    status = resp.status_code
    if status in (401, 403) or "API_KEY_INVALID" in details or "API key not valid" in details:
        return UpstreamAuthError(details=details, status_code=status)
    if status == 429 or "RESOURCE_EXHAUSTED" in details:
        return UpstreamQuotaError(details=details, status_code=status)
    if status >= 500:
        return UpstreamTransportError(details=details, status_code=status)
    return UpstreamError(details=details, status_code=status)


def extract_candidate_text(payload) -> str | None:
    """Return the first candidate's text, or None when the response carries none.

    Raises UpstreamSafetyRejection when the prompt or the candidate was blocked,
    and UpstreamShapeError when the structure is not a generateContent response.
    """
    if not isinstance(payload, dict):
        raise UpstreamShapeError(details=f"Expected a JSON object, got {type(payload).__name__}")

    feedback = payload.get("promptFeedback") or {}
    if isinstance(feedback, dict) and feedback.get("blockReason"):
        raise UpstreamSafetyRejection(details=f"Prompt blocked: {feedback['blockReason']}")

    candidates = payload.get("candidates")
    if candidates is None:
        return None
    if not isinstance(candidates, list):
        raise UpstreamShapeError(details="'candidates' is not a list")
    if not candidates:
        return None

    first = candidates[0]
    if not isinstance(first, dict):
        raise UpstreamShapeError(details="candidate is not an object")

    parts = (first.get("content") or {}).get("parts") or []
    if not isinstance(parts, list):
        raise UpstreamShapeError(details="'content.parts' is not a list")
    text = None
    if parts and isinstance(parts[0], dict):
        text = parts[0].get("text")

    if not text and first.get("finishReason") in SAFETY_FINISH_REASONS:
        raise UpstreamSafetyRejection(details=f"Response blocked: {first['finishReason']}")
    if text is not None and not isinstance(text, str):
        raise UpstreamShapeError(details="candidate text is not a string")
    return text or None


class GeminiClient:
    """Client for the Gemini generateContent endpoint.

    Use as a context manager so the HTTP session is closed whether the call
    succeeds, fails or times out.
    """

    def __init__(self, api_key: str, model: str = None, timeout: int = None):
        self.api_key = api_key
        self.model = model or GEMINI_MODEL
        self.timeout = timeout or GEMINI_TIMEOUT
        self.session = requests.Session()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        self.session.close()

    def generate_content(self, prompt: str, pdf_base64: str = None) -> dict:
        """Send one prompt (optionally with an inline PDF) and return the raw JSON response."""
        parts = [{"text": prompt}]
        if pdf_base64:
            parts.append({"inline_data": {"mime_type": "application/pdf", "data": pdf_base64}})
        body = {
            "contents": [{"parts": parts}],
            "generationConfig": GENERATION_CONFIG,
        }
        url = f"{BASE_URL}/models/{self.model}:generateContent"
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}

        try:
            resp = self.session.post(url, json=body, headers=headers, timeout=self.timeout)
        except requests.Timeout as e:
            raise UpstreamTransportError(f"Request timed out after {self.timeout}s", details=str(e))
        except requests.RequestException as e:
            raise UpstreamTransportError(details=str(e))

        logger.info(f"Gemini API response status: {resp.status_code}")
        if not resp.ok:
            raise classify_http_error(resp)

        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamShapeError(details=f"Response is not JSON: {e}")

    def generate_text(self, prompt: str, pdf_base64: str = None) -> str | None:
        return extract_candidate_text(self.generate_content(prompt, pdf_base64))
