import pytest
import requests

from errors import (
    UpstreamError, UpstreamAuthError, UpstreamQuotaError, UpstreamSafetyRejection,
    UpstreamShapeError, UpstreamTransportError,
)
from services.api_clients.gemini_client import GeminiClient, extract_candidate_text


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else str(payload)

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.requests = []
        self.closed = False

    def post(self, url, **kwargs):
        self.requests.append({"url": url, **kwargs})
        if self.exc is not None:
            raise self.exc
        return self.response

    def close(self):
        self.closed = True


def _ok(text):
    return FakeResponse(200, {"candidates": [{"content": {"parts": [{"text": text}]}}]})


def _client(session):
    client = GeminiClient("test-key", model="gemini-test", timeout=5)
    client.session = session
    return client


def test_generate_text_posts_prompt_and_returns_first_candidate():
    session = FakeSession(_ok("Strong fundamentals."))
    with _client(session) as client:
        text = client.generate_text("Analyze this deal")

    assert text == "Strong fundamentals."
    sent = session.requests[0]
    assert sent["url"].endswith("/models/gemini-test:generateContent")
    assert sent["headers"]["x-goog-api-key"] == "test-key"
    assert "test-key" not in sent["url"]
    assert sent["timeout"] == 5
    assert sent["json"]["contents"][0]["parts"] == [{"text": "Analyze this deal"}]
    assert sent["json"]["generationConfig"]["maxOutputTokens"] == 2048


def test_inline_pdf_is_attached_as_second_part():
    session = FakeSession(_ok("ok"))
    _client(session).generate_text("prompt", pdf_base64="JVBERi0=")

    parts = session.requests[0]["json"]["contents"][0]["parts"]
    assert parts[1] == {"inline_data": {"mime_type": "application/pdf", "data": "JVBERi0="}}


def test_session_is_closed_even_when_call_fails():
    session = FakeSession(exc=requests.ConnectionError("boom"))
    with pytest.raises(UpstreamTransportError):
        with _client(session) as client:
            client.generate_text("prompt")
    assert session.closed


@pytest.mark.parametrize("exc", [requests.Timeout("slow"), requests.ConnectionError("down")])
def test_network_failures_are_transport_errors(exc):
    with pytest.raises(UpstreamTransportError):
        _client(FakeSession(exc=exc)).generate_content("prompt")


@pytest.mark.parametrize("status, message, kind", [
    (401, "unauthenticated", UpstreamAuthError),
    (403, "permission denied", UpstreamAuthError),
    (400, "API key not valid. Please pass a valid API key.", UpstreamAuthError),
    (429, "Resource has been exhausted", UpstreamQuotaError),
    (503, "The model is overloaded", UpstreamTransportError),
])
def test_http_errors_are_classified(status, message, kind):
    resp = FakeResponse(status, {"error": {"code": status, "message": message}})
    with pytest.raises(kind) as exc:
        _client(FakeSession(resp)).generate_content("prompt")
    assert exc.value.status_code == status
    assert message in exc.value.details


def test_unclassified_client_error_is_generic_upstream_error():
    resp = FakeResponse(404, {"error": {"message": "model not found"}})
    with pytest.raises(UpstreamError) as exc:
        _client(FakeSession(resp)).generate_content("prompt")
    assert type(exc.value) is UpstreamError


def test_non_json_body_is_shape_error():
    resp = FakeResponse(200, None, text="<html>proxy error</html>")
    with pytest.raises(UpstreamShapeError):
        _client(FakeSession(resp)).generate_content("prompt")


def test_extract_returns_none_when_no_candidates():
    assert extract_candidate_text({}) is None
    assert extract_candidate_text({"candidates": []}) is None
    assert extract_candidate_text({"candidates": [{"content": {"parts": [{"text": ""}]}}]}) is None


@pytest.mark.parametrize("payload", [
    ["not", "an", "object"],
    {"candidates": "nope"},
    {"candidates": ["nope"]},
    {"candidates": [{"content": {"parts": [{"text": 42}]}}]},
])
def test_extract_rejects_unexpected_structure(payload):
    with pytest.raises(UpstreamShapeError):
        extract_candidate_text(payload)


def test_extract_detects_safety_blocks():
    with pytest.raises(UpstreamSafetyRejection):
        extract_candidate_text({"promptFeedback": {"blockReason": "SAFETY"}})
    with pytest.raises(UpstreamSafetyRejection):
        extract_candidate_text({"candidates": [{"finishReason": "SAFETY"}]})
