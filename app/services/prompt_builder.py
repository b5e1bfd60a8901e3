import json

from app.models.lesson import GenerationRequest

# Shape the model must reproduce; mirrors LessonPackage field for field.
OUTPUT_SCHEMA = {
    "lessonPlan": {
        "title": "string",
        "gradeLevel": "string",
        "subject": "string",
        "topic": "string",
        "duration": "string",
        "overview": ["string"],
        "learningObjectives": ["string"],
        "standards": ["string"],
        "segments": [
            {
                "label": "string",
                "purpose": "string",
                "steps": ["string"],
                "timing": "string",
            }
        ],
        "differentiation": [
            {"audience": "string", "adaptations": ["string"]}
        ],
        "materials": ["string"],
        "homework": "string",
        "assessment": "string",
    },
    "quiz": {
        "title": "string",
        "format": "string",
        "questions": [
            {
                "question": "string",
                "options": ["string"],
                "answer": "string",
                "explanation": "string",
            }
        ],
    },
    "studentNotes": {
        "summary": "string",
        "vocabulary": [{"term": "string", "definition": "string"}],
        "studyTips": ["string"],
        "realWorldConnections": ["string"],
    },
    "feedbackReport": {
        "teacherSummary": "string",
        "strengths": ["string"],
        "nextSteps": ["string"],
        "parentNote": "string",
    },
    "teachingAids": [
        {"title": "string", "prompt": "string", "usage": "string"}
    ],
    "metadata": {"generatedAt": "string", "model": "string", "tone": "string"},
}


def build_prompt(request: GenerationRequest) -> str:
    """Build the single instruction sent to the text-generation provider.

    Pure and deterministic: the same request always yields the same text.
    """
    objectives = " ".join(
        f"{index}. {objective}"
        for index, objective in enumerate(request.objectives, start=1)
    )
    focus_skills = (request.focus_skills or "").strip()
    if focus_skills:
        focus_skills = f"Focus skills/competencies: {focus_skills}."
    assessment_type = (request.assessment_type or "").strip()
    if assessment_type:
        assessment_type = f"Assessment preference: {assessment_type}."
    aids_rule = (
        "- Provide at least two teachingAids entries with image-generation prompts and classroom usage."
        if request.include_aids
        else "- Omit the teachingAids key entirely."
    )
    schema = json.dumps(OUTPUT_SCHEMA, indent=2)

    return f"""You are EduSmart Assistant, an instructional design expert specialised in Ghanaian Junior and Senior High School curriculum standards.

Produce a JSON object that strictly matches this structure:
{schema}

Context:
- Subject: {request.subject}
- Topic: {request.topic}
- Grade level: {request.grade_level}
- Duration: {request.resolved_duration}
- Tone: {request.resolved_tone}
{focus_skills}
{assessment_type}
- Ghana SHS & JHS curriculum alignment is mandatory.
- Learning objectives: {objectives}

Rules:
- Ensure language and content difficulty align with {request.grade_level}.
- Lesson segments must cover introduction, main instruction, guided practice, independent practice, differentiation, assessment, and reflection.
- Quiz must contain exactly 5 questions of varied types, with clearly marked answers and explanations.
- Provide at least two differentiation strategies covering struggling learners and advanced learners.
- Provide at least three tailored study tips in student notes.
- All lists must contain at least 3 bullet items unless information is inherently short.
{aids_rule}
- Do not include Markdown code fences or commentary, only pure JSON."""
