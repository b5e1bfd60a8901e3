import asyncio
import json
from types import SimpleNamespace

import pytest
from google.api_core import exceptions as google_exceptions

from app.core.errors import ProviderParseError, ProviderTransportError, ProviderUnavailableError
from app.services import llm_service
from app.services.llm_service import LLMService, count_problems, parse_lesson_package, strip_code_fences


class FakeGeminiModel:
    instances = []

    def __init__(self, model_name, generation_config):
        self.model_name = model_name
        self.generation_config = generation_config
        self.calls = []
        self.reply = None
        FakeGeminiModel.instances.append(self)

    async def generate_content_async(self, prompt, request_options=None):
        # Like the SDK: transient errors are retried unless retry is switched off
        attempts = 1 if (request_options or {}).get("retry", "default") is None else 4
        for _ in range(attempts):
            self.calls.append((prompt, request_options))
            if not isinstance(self.reply, google_exceptions.ServiceUnavailable):
                break
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


class BlockedResponse:
    @property
    def text(self):
        raise ValueError("The response was blocked")


@pytest.fixture
def gemini(monkeypatch):
    FakeGeminiModel.instances = []
    configured = {}
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setattr(llm_service.genai, "configure", lambda api_key: configured.update(api_key=api_key))
    monkeypatch.setattr(llm_service.genai, "GenerativeModel", FakeGeminiModel)
    return configured


def test_gemini_generate(gemini, make_settings):
    service = LLMService(make_settings(llm_timeout_seconds=12))
    service.llm.reply = SimpleNamespace(text='{"ok": true}')

    assert asyncio.run(service.generate("prompt")) == '{"ok": true}'
    assert gemini["api_key"] == "test-key"
    model = FakeGeminiModel.instances[0]
    assert model.model_name == "models/gemini-1.5-pro-latest"
    assert model.calls == [("prompt", {"timeout": 12, "retry": None})]

def test_gemini_sampling_config(gemini, make_settings):
    service = LLMService(make_settings())
    config = service.llm.generation_config
    assert config.temperature == 0.7
    assert config.top_p == 0.8
    assert config.max_output_tokens == 2048

def test_gemini_http_error_is_transport_error(gemini, make_settings):
    service = LLMService(make_settings())
    service.llm.reply = google_exceptions.ServiceUnavailable("overloaded")
    with pytest.raises(ProviderTransportError):
        asyncio.run(service.generate("prompt"))
    assert len(service.llm.calls) == 1

def test_gemini_timeout_is_transport_error(gemini, make_settings):
    service = LLMService(make_settings())
    service.llm.reply = asyncio.TimeoutError()
    with pytest.raises(ProviderTransportError):
        asyncio.run(service.generate("prompt"))

def test_gemini_blocked_response_is_parse_error(gemini, make_settings):
    service = LLMService(make_settings())
    service.llm.reply = BlockedResponse()
    with pytest.raises(ProviderParseError):
        asyncio.run(service.generate("prompt"))

def test_gemini_empty_response_is_parse_error(gemini, make_settings):
    service = LLMService(make_settings())
    service.llm.reply = SimpleNamespace(text="   ")
    with pytest.raises(ProviderParseError):
        asyncio.run(service.generate("prompt"))

def test_missing_key_is_unavailable(make_settings):
    service = LLMService(make_settings())
    with pytest.raises(ProviderUnavailableError):
        asyncio.run(service.generate("prompt"))

def test_unknown_provider_is_unavailable(monkeypatch, make_settings):
    monkeypatch.setenv("GOOGLE_API_KEY", "k")
    service = LLMService(make_settings(llm_provider="mistral"))
    with pytest.raises(ProviderUnavailableError):
        asyncio.run(service.generate("prompt"))

def test_openai_generate(monkeypatch, make_settings):
    built = {}

    class FakeChat:
        def __init__(self, **kwargs):
            built.update(kwargs)

        async def ainvoke(self, prompt):
            return SimpleNamespace(content=f"echo: {prompt}")

    monkeypatch.setattr(llm_service, "ChatOpenAI", FakeChat)
    service = LLMService(make_settings(llm_provider="openai", llm_model="gpt-4o-mini", openai_api_key="sk-test"))

    assert asyncio.run(service.generate("hi")) == "echo: hi"
    assert built["model"] == "gpt-4o-mini"
    assert built["max_retries"] == 0
    assert built["openai_api_key"] == "sk-test"

def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('{"a": 1}') == '{"a": 1}'

def test_parse_lesson_package(live_package_json):
    package = parse_lesson_package(f"```json\n{live_package_json}\n```")
    assert package.lesson_plan.title == "Photosynthesis: How Plants Make Food"
    assert len(package.quiz.questions) == 5

def test_parse_lesson_package_with_commentary(live_package_json):
    package = parse_lesson_package(f"Sure! Here it is:\n{live_package_json}\nEnjoy.")
    assert package.student_notes.summary

def test_parse_rejects_wrong_shape():
    with pytest.raises(ProviderParseError):
        parse_lesson_package('{"lessonPlan": "nope"}')

def test_parse_rejects_non_json():
    with pytest.raises(ProviderParseError):
        parse_lesson_package("I could not produce a lesson.")

def _short_package(live_package_json, **changes):
    data = json.loads(live_package_json)
    data["quiz"]["questions"] = data["quiz"]["questions"][:changes.get("questions", 5)]
    if "differentiation" in changes:
        data["lessonPlan"]["differentiation"] = data["lessonPlan"]["differentiation"][:changes["differentiation"]]
    if "study_tips" in changes:
        data["studentNotes"]["studyTips"] = data["studentNotes"]["studyTips"][:changes["study_tips"]]
    return json.dumps(data)

@pytest.mark.parametrize("changes", [
    {"questions": 2},
    {"differentiation": 1},
    {"study_tips": 0},
    {"questions": 2, "differentiation": 0, "study_tips": 0},
])
def test_parse_rejects_short_lists(live_package_json, changes):
    with pytest.raises(ProviderParseError):
        parse_lesson_package(_short_package(live_package_json, **changes))

def test_parse_rejects_extra_questions(live_package_json):
    data = json.loads(live_package_json)
    data["quiz"]["questions"].append(data["quiz"]["questions"][0])
    with pytest.raises(ProviderParseError) as exc_info:
        parse_lesson_package(json.dumps(data))
    assert "quiz.questions has 6 items" in str(exc_info.value)

def test_count_problems_on_complete_package(live_package_json):
    assert count_problems(parse_lesson_package(live_package_json)) == []
