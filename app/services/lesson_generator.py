from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from app.core.config import Settings, settings as default_settings
from app.core.errors import ProviderError
from app.core.logging import logger
from app.models.lesson import GenerationRequest, LessonPackage, PackageMetadata
from app.services.fallback_builder import build_fallback, isoformat_utc
from app.services.llm_service import LLMService, parse_lesson_package
from app.services.prompt_builder import build_prompt


@dataclass(frozen=True)
class LiveResult:
    package: LessonPackage
    source: str = "live"


@dataclass(frozen=True)
class FallbackResult:
    package: LessonPackage
    reason: str
    source: str = "fallback"


GenerationResult = Union[LiveResult, FallbackResult]


class LessonGenerator:
    """Try live generation once, otherwise answer with the template package.

    Provider failures never escape ``generate``; anything else does.
    """

    def __init__(self, settings: Settings, llm_service: Optional[LLMService] = None):
        self.settings = settings
        self.llm_service = llm_service or LLMService(settings)

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        try:
            package = await self._generate_live(request)
        except ProviderError as e:
            logger.warning(f"Live generation unavailable ({type(e).__name__}): {e}. Using fallback template.")
            return FallbackResult(package=build_fallback(request), reason=str(e))

        logger.info(f"✅ Live lesson package generated - {request.subject}: {request.topic}")
        return LiveResult(package=package)

    async def _generate_live(self, request: GenerationRequest) -> LessonPackage:
        prompt = build_prompt(request)
        raw = await self.llm_service.generate(prompt)
        package = parse_lesson_package(raw)

        # Metadata is ours to stamp; aids only when requested
        return package.model_copy(update={
            "teaching_aids": package.teaching_aids if request.include_aids else None,
            "metadata": PackageMetadata(
                generated_at=isoformat_utc(datetime.now(timezone.utc)),
                model=self.llm_service.model_name,
                tone=request.resolved_tone,
            ),
        })


def get_lesson_generator() -> LessonGenerator:
    """FastAPI dependency; tests override it to inject settings or a fake provider."""
    return LessonGenerator(default_settings)
