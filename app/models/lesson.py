import re
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from app.core.errors import LessonValidationError

DEFAULT_DURATION = "45 minutes"
DEFAULT_TONE = "supportive and practical"


def split_objectives(raw: str) -> List[str]:
    """Split newline-delimited objectives, trimming each line and dropping blanks."""
    return [line.strip() for line in re.split(r"\r?\n", raw) if line.strip()]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================
# REQUEST
# ============================================

class GenerationRequest(CamelModel):
    """Lesson parameters submitted by a teacher. Immutable once validated."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        frozen=True,
    )

    subject: StrictStr
    topic: StrictStr
    grade_level: StrictStr
    learning_objectives: StrictStr
    duration: Optional[StrictStr] = None
    assessment_type: Optional[StrictStr] = None
    tone: Optional[StrictStr] = None
    focus_skills: Optional[StrictStr] = None
    include_aids: StrictBool = True

    @field_validator("subject", "topic", "grade_level", "learning_objectives")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @property
    def objectives(self) -> List[str]:
        return split_objectives(self.learning_objectives)

    @property
    def resolved_duration(self) -> str:
        if self.duration and self.duration.strip():
            return self.duration.strip()
        return DEFAULT_DURATION

    @property
    def resolved_tone(self) -> str:
        if self.tone and self.tone.strip():
            return self.tone.strip()
        return DEFAULT_TONE


def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Turn pydantic error dicts into ``{"field", "message"}`` entries.

    FastAPI prefixes body errors with ``"body"``; that segment is dropped so
    both validation paths report the same field names.
    """
    details = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if error.get("type") == "json_invalid":
            loc = []
        elif loc and loc[0] == "body":
            loc = loc[1:]
        details.append({
            "field": ".".join(loc) or "body",
            "message": error.get("msg", "Invalid value"),
        })
    return details


def validate_generation_request(payload: Any) -> GenerationRequest:
    """Validate an arbitrary decoded payload into a GenerationRequest.

    Raises LessonValidationError listing every violated field.
    """
    try:
        return GenerationRequest.model_validate(payload)
    except ValidationError as e:
        raise LessonValidationError(format_validation_errors(e.errors())) from e


# ============================================
# LESSON PACKAGE
# ============================================

class LessonSegment(CamelModel):
    label: str
    purpose: str
    steps: List[str]
    timing: str


class DifferentiationStrategy(CamelModel):
    audience: str
    adaptations: List[str]


class LessonPlan(CamelModel):
    title: str
    grade_level: str
    subject: str
    topic: str
    duration: str
    overview: List[str]
    learning_objectives: List[str]
    standards: List[str]
    segments: List[LessonSegment]
    differentiation: List[DifferentiationStrategy]
    materials: List[str]
    homework: str
    assessment: str


class QuizQuestion(CamelModel):
    question: str
    options: List[str] = Field(default_factory=list)
    answer: str
    explanation: str


class Quiz(CamelModel):
    title: str
    format: str
    questions: List[QuizQuestion]


class VocabularyTerm(CamelModel):
    term: str
    definition: str


class StudentNotes(CamelModel):
    summary: str
    vocabulary: List[VocabularyTerm]
    study_tips: List[str]
    real_world_connections: List[str]


class FeedbackReport(CamelModel):
    teacher_summary: str
    strengths: List[str]
    next_steps: List[str]
    parent_note: str


class TeachingAid(CamelModel):
    title: str
    prompt: str
    usage: str


class PackageMetadata(CamelModel):
    generated_at: str
    model: str
    tone: str


class LessonPackage(CamelModel):
    lesson_plan: LessonPlan
    quiz: Quiz
    student_notes: StudentNotes
    feedback_report: FeedbackReport
    teaching_aids: Optional[List[TeachingAid]] = None
    metadata: PackageMetadata

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict with wire names; ``teachingAids`` omitted when absent."""
        return self.model_dump(by_alias=True, exclude_none=True)
