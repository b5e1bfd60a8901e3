# app/routers/teacher.py
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Response

from app.core.config import settings
from app.core.logging import logger
from app.models.lesson import DEFAULT_DURATION, DEFAULT_TONE, LessonPackage, validate_generation_request
from app.services.lesson_generator import LessonGenerator, get_lesson_generator

router = APIRouter(prefix=settings.api_prefix, tags=["teacher"])

GRADE_LEVELS = ["JHS 1", "JHS 2", "JHS 3", "SHS 1", "SHS 2", "SHS 3"]

SUBJECTS = [
    "Mathematics",
    "Integrated Science",
    "English Language",
    "Social Studies",
    "ICT",
    "Agricultural Science",
    "Business Studies",
    "Creative Arts",
]

TONES = [
    DEFAULT_TONE,
    "energetic and motivational",
    "calm and reflective",
    "rigorous and academic",
]

SAMPLE_OBJECTIVES = (
    "Describe the key concept and why it matters.\n"
    "Apply the concept to a Ghanaian real-world scenario.\n"
    "Demonstrate mastery through a short assessment."
)


@router.post(
    "/generate",
    response_model=LessonPackage,
    response_model_exclude_none=True,
    summary="Generate a lesson package",
)
async def generate_lesson_package(
    response: Response,
    payload: Dict[str, Any] = Body(...),
    generator: LessonGenerator = Depends(get_lesson_generator),
):
    """Lesson plan, quiz, student notes and feedback report for one lesson.

    Always answers with a package: live output when the provider succeeds,
    the template package otherwise.
    """
    request = validate_generation_request(payload)
    logger.info(f"Lesson package - {request.subject}, {request.grade_level}, topic: {request.topic}")

    result = await generator.generate(request)
    response.headers["X-Generation-Source"] = result.source
    return result.package


@router.get("/options")
async def get_options():
    """Choices offered by the lesson request form."""
    return {
        "grade_levels": GRADE_LEVELS,
        "subjects": SUBJECTS,
        "tones": TONES,
        "defaults": {
            "duration": DEFAULT_DURATION,
            "tone": DEFAULT_TONE,
            "includeAids": True,
            "learningObjectives": SAMPLE_OBJECTIVES,
        },
    }
