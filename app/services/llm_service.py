from __future__ import annotations

import json
import re
from typing import List, Optional

import google.generativeai as genai
from langchain_openai import ChatOpenAI
from pydantic import ValidationError

from app.core.config import Settings
from app.core.errors import ProviderParseError, ProviderTransportError, ProviderUnavailableError
from app.core.logging import logger
from app.models.lesson import LessonPackage

FENCE_PATTERN = re.compile(r"```(?:json)?")

QUIZ_QUESTIONS = 5
MIN_DIFFERENTIATION = 2
MIN_LIST_ITEMS = 3


class LLMService:
    """Single-shot text generation against the configured provider."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._llm = None
        self.llm_type: Optional[str] = None

    @property
    def model_name(self) -> str:
        return self.settings.llm_model

    # ---------------------
    # LLM Initialization
    # ---------------------
    @property
    def llm(self):
        if self._llm is None:
            self._initialize_llm()
        return self._llm

    def _initialize_llm(self):
        """Build the Gemini or OpenAI client. No network traffic happens here."""
        provider = self.settings.provider
        api_key = self.settings.llm_api_key

        if api_key is None:
            raise ProviderUnavailableError(f"No API key configured for provider '{provider}'")

        logger.info(f"Initializing LLM provider={provider}")

        if provider == "google":
            genai.configure(api_key=api_key)

            # Gemini expects the "models/" prefix
            requested = self.settings.llm_model
            model_name = requested if requested.startswith("models/") else f"models/{requested}"

            generation_config = genai.GenerationConfig(
                temperature=self.settings.llm_temperature,
                top_p=self.settings.llm_top_p,
                max_output_tokens=self.settings.max_tokens,
            )
            self._llm = genai.GenerativeModel(
                model_name=model_name,
                generation_config=generation_config
            )
            self.llm_type = "google"

        elif provider == "openai":
            self._llm = ChatOpenAI(
                model=self.settings.llm_model,
                temperature=self.settings.llm_temperature,
                top_p=self.settings.llm_top_p,
                max_tokens=self.settings.max_tokens,
                timeout=self.settings.llm_timeout_seconds,
                max_retries=0,
                openai_api_key=api_key
            )
            self.llm_type = "openai"

        else:
            raise ProviderUnavailableError(f"Unsupported LLM provider: {provider}")

        logger.info(f"✓ {self.llm_type} LLM initialized with model {self.settings.llm_model}")

    # ---------------------
    # Generation
    # ---------------------
    async def generate(self, prompt: str) -> str:
        """Send one prompt and return the generated text."""
        llm = self.llm

        try:
            if self.llm_type == "google":
                resp = await llm.generate_content_async(
                    prompt,
                    request_options={
                        "timeout": self.settings.llm_timeout_seconds,
                        # The SDK retries 503s by default; one call per request
                        "retry": None,
                    },
                )
            else:
                resp = await llm.ainvoke(prompt)
        except Exception as e:
            raise ProviderTransportError(f"{self.llm_type} request failed: {e}") from e

        try:
            text = resp.text if self.llm_type == "google" else resp.content
        except ValueError as e:
            # Gemini raises when the candidate was blocked or empty
            raise ProviderParseError(f"No text in {self.llm_type} response: {e}") from e

        if not isinstance(text, str) or not text.strip():
            raise ProviderParseError(f"Empty {self.llm_type} response")
        return text


def strip_code_fences(text: str) -> str:
    return FENCE_PATTERN.sub("", text).strip()


def parse_lesson_package(text: str) -> LessonPackage:
    """Parse provider text into a LessonPackage, tolerating Markdown fences."""
    cleaned = strip_code_fences(text)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        json_match = re.search(r"\{.*\}", cleaned, re.DOTALL)
        if not json_match:
            raise ProviderParseError("Response contains no JSON object")
        try:
            data = json.loads(json_match.group())
        except json.JSONDecodeError as e:
            raise ProviderParseError(f"Response is not valid JSON: {e}") from e

    try:
        package = LessonPackage.model_validate(data)
    except ValidationError as e:
        raise ProviderParseError(
            f"Response does not match the lesson package shape ({e.error_count()} errors)"
        ) from e

    problems = count_problems(package)
    if problems:
        raise ProviderParseError(f"Response breaks lesson package rules: {'; '.join(problems)}")
    return package


def count_problems(package: LessonPackage) -> List[str]:
    """List the item-count rules a package breaks; empty when it is complete."""
    plan = package.lesson_plan
    notes = package.student_notes
    problems = []

    if len(package.quiz.questions) != QUIZ_QUESTIONS:
        problems.append(f"quiz.questions has {len(package.quiz.questions)} items, expected {QUIZ_QUESTIONS}")
    if len(plan.differentiation) < MIN_DIFFERENTIATION:
        problems.append(f"lessonPlan.differentiation has {len(plan.differentiation)} items, expected at least {MIN_DIFFERENTIATION}")

    lists = {
        "lessonPlan.overview": plan.overview,
        "lessonPlan.segments": plan.segments,
        "lessonPlan.materials": plan.materials,
        "studentNotes.studyTips": notes.study_tips,
    }
    for name, items in lists.items():
        if len(items) < MIN_LIST_ITEMS:
            problems.append(f"{name} has {len(items)} items, expected at least {MIN_LIST_ITEMS}")
    return problems
