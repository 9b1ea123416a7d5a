# tests/conftest.py
import pytest

import app as app_module  # run tests from repo root
from config import API_KEY_VARS
from services.analysis_gateway import AnalysisGateway


class FakeGeminiClient:
    """Stands in for GeminiClient: acts as its own factory and context manager."""

    def __init__(self, text="**Property Overview:**\n- Stabilized multifamily asset", exc=None):
        self.text = text
        self.exc = exc
        self.api_key = None
        self.calls = []
        self.closed = False

    def __call__(self, api_key):
        self.api_key = api_key
        return self

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True
        return False

    def generate_text(self, prompt, pdf_base64=None):
        self.calls.append({"prompt": prompt, "pdf_base64": pdf_base64})
        if self.exc is not None:
            raise self.exc
        return self.text


SCENARIO_INPUTS = {
    "askingPrice": 50000000,
    "targetHold": 5,
    "targetIRR": 15,
    "targetEM": 1.8,
    "leverage": 70,
    "interestRate": 6.5,
    "exitCap": 5.0,
    "strategy": "Value-add",
}


@pytest.fixture
def client():
    app_module.app.config["TESTING"] = True
    return app_module.app.test_client()


@pytest.fixture
def no_api_key(monkeypatch):
    for name in API_KEY_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_upstream(monkeypatch):
    fake = FakeGeminiClient()
    monkeypatch.setattr(
        app_module, "gateway",
        AnalysisGateway(client_factory=fake, api_key_resolver=lambda: "test-key"),
    )
    return fake


@pytest.fixture
def scenario_inputs():
    return dict(SCENARIO_INPUTS)
