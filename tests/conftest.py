import json

import pytest

from app.core.config import Settings
from app.models.lesson import GenerationRequest
from app.services.fallback_builder import build_fallback

KEY_ENV_VARS = [
    "GOOGLE_API_KEY",
    "GEMINI_API_KEY",
    "GEMINI_PRO_API_KEY",
    "GOOGLE_AI_STUDIO_KEY",
    "OPENAI_API_KEY",
    "LLM_PROVIDER",
    "LLM_MODEL",
]


@pytest.fixture(autouse=True)
def clean_llm_env(monkeypatch):
    """Keep real credentials out of every test."""
    for name in KEY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_settings():
    def _make(**overrides):
        return Settings(_env_file=None, **overrides)
    return _make


@pytest.fixture
def valid_payload():
    return {
        "subject": "Integrated Science",
        "topic": "Photosynthesis",
        "gradeLevel": "JHS 2",
        "learningObjectives": "Explain X.\n\nApply X.\n",
        "duration": "60 minutes",
        "tone": "energetic and motivational",
        "assessmentType": "Exit tickets",
        "focusSkills": "Critical thinking",
    }


@pytest.fixture
def lesson_request(valid_payload):
    return GenerationRequest.model_validate(valid_payload)


@pytest.fixture
def live_package_json(lesson_request):
    """A well-formed package as a provider would return it."""
    payload = build_fallback(lesson_request).to_payload()
    payload["lessonPlan"]["title"] = "Photosynthesis: How Plants Make Food"
    payload["metadata"] = {"generatedAt": "yesterday", "model": "made-up", "tone": "odd"}
    return json.dumps(payload)


class FakeLLMService:
    """Stands in for LLMService; records prompts instead of calling a provider."""

    model_name = "gemini-test"

    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.prompts = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def fake_llm():
    return FakeLLMService
