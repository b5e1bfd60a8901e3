"""Template-based lesson package used when live generation is unavailable."""

from datetime import datetime, timezone
from typing import Optional

from app.models.lesson import (
    DifferentiationStrategy,
    FeedbackReport,
    GenerationRequest,
    LessonPackage,
    LessonPlan,
    LessonSegment,
    PackageMetadata,
    Quiz,
    QuizQuestion,
    StudentNotes,
    TeachingAid,
    VocabularyTerm,
)

FALLBACK_MODEL = "fallback-template-v1"


def isoformat_utc(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _segments():
    # Timings add up to the default 45-minute lesson
    return [
        LessonSegment(
            label="Starter",
            purpose="Activate prior knowledge and set the lesson intention.",
            steps=[
                "Share the lesson objective and success criteria using learner-friendly language.",
                "Use a think-pair-share to surface what learners already know about the topic.",
                "Collect quick responses with mini whiteboards or oral checks.",
            ],
            timing="8 mins",
        ),
        LessonSegment(
            label="Explicit Instruction",
            purpose="Introduce key concepts with modelling and questioning.",
            steps=[
                "Present a brief story or real-world scenario relevant to the Ghanaian context.",
                "Model how to approach the core task while verbalising key thinking steps.",
                "Check understanding with targeted questions aligned to Bloom's levels.",
            ],
            timing="12 mins",
        ),
        LessonSegment(
            label="Guided Practice",
            purpose="Support learners to apply the concept collaboratively.",
            steps=[
                "Provide structured practice items in mixed-ability groups.",
                "Circulate to scaffold learners who require additional support.",
                "Invite groups to share solutions and justify their thinking.",
            ],
            timing="10 mins",
        ),
        LessonSegment(
            label="Independent Practice",
            purpose="Consolidate learning and gather assessment evidence.",
            steps=[
                "Learners complete 3-4 independent tasks that grow in complexity.",
                "Encourage use of success criteria as a checklist for quality work.",
                "Collect exit tickets to monitor individual mastery.",
            ],
            timing="10 mins",
        ),
        LessonSegment(
            label="Reflection & Closure",
            purpose="Reinforce key takeaways and preview the next lesson.",
            steps=[
                "Learners self-assess their progress using traffic-light cards.",
                "Discuss how the skill links to real-life applications within Ghana.",
                "Set a brief reflective question for home learning.",
            ],
            timing="5 mins",
        ),
    ]


def _differentiation():
    return [
        DifferentiationStrategy(
            audience="Learners needing additional support",
            adaptations=[
                "Provide vocabulary cards with visuals and simplified explanations.",
                "Offer guided sentence starters and thinking routines.",
                "Pair with supportive peers during collaborative tasks.",
            ],
        ),
        DifferentiationStrategy(
            audience="High-attaining learners",
            adaptations=[
                "Include extension challenges that require deeper reasoning.",
                "Invite them to facilitate peer feedback sessions.",
                "Assign leadership roles during group tasks to stretch communication skills.",
            ],
        ),
    ]


def _quiz(topic: str) -> Quiz:
    return Quiz(
        title=f"{topic} Mastery Check",
        format="Combination of multiple choice, short response, and application questions.",
        questions=[
            QuizQuestion(
                question=f"What is one essential concept about {topic} that learners should remember?",
                options=[
                    "A misconception related to the concept",
                    "A partially correct idea",
                    "The accurate definition or explanation",
                    "An unrelated fact",
                ],
                answer="The accurate definition or explanation",
                explanation="Learners must identify the precise concept to demonstrate mastery.",
            ),
            QuizQuestion(
                question=f"Explain how {topic} appears in daily life within the Ghanaian context.",
                options=[],
                answer="Accept answers that reference authentic cultural, economic, or environmental connections.",
                explanation="This open response checks the learner's ability to transfer classroom ideas to real situations.",
            ),
            QuizQuestion(
                question=f"Apply {topic} to solve a short scenario-based problem.",
                options=[],
                answer="Solution should include key steps used during guided practice.",
                explanation="Encourage learners to show their working and reference success criteria.",
            ),
            QuizQuestion(
                question="List two strategies you can use to self-monitor during practice.",
                options=[],
                answer="Learners should reference success criteria, peer feedback, or teacher prompts.",
                explanation="Supports metacognition and aligns with competency-based assessment.",
            ),
            QuizQuestion(
                question="Describe one way you can extend your understanding of this topic beyond the classroom.",
                options=[],
                answer="Answers may include community projects, digital research, or cross-curricular applications.",
                explanation="Checks learner agency and ability to connect learning to future goals.",
            ),
        ],
    )


def _teaching_aids(topic: str, grade_level: str):
    return [
        TeachingAid(
            title=f"{topic} Concept Poster",
            prompt=(
                f"Create a vibrant classroom poster illustrating the core idea of {topic} "
                f"for {grade_level} students in Ghana. Include culturally relevant symbols "
                "and succinct explanations."
            ),
            usage="Use during explicit instruction and display in the classroom for ongoing reference.",
        ),
        TeachingAid(
            title="Real-World Scenario Illustration",
            prompt=f"Generate a comic-style illustration showing a Ghanaian student applying {topic} in a practical setting.",
            usage="Incorporate into guided practice to spark discussion about real-life applications.",
        ),
    ]


def build_fallback(request: GenerationRequest, now: Optional[datetime] = None) -> LessonPackage:
    """Build a complete lesson package from templates, without any AI call.

    Total over validated requests. Only ``metadata.generatedAt`` varies
    between calls with the same request.
    """
    topic = request.topic
    subject = request.subject
    grade_level = request.grade_level
    generated_at = isoformat_utc(now or datetime.now(timezone.utc))

    lesson_plan = LessonPlan(
        title=f"{topic} Lesson Blueprint",
        grade_level=grade_level,
        subject=subject,
        topic=topic,
        duration=request.resolved_duration,
        overview=[
            f"Introduce {topic} with a quick diagnostic to activate prior knowledge.",
            f"Model core {subject} concepts with concrete examples and guided questioning.",
            "Support learners to practise skills independently and reflect on success criteria.",
        ],
        learning_objectives=request.objectives,
        standards=[
            "Aligns with Ghana National Pre-Tertiary Curriculum competency strands.",
            f"Addresses knowledge, skills, and values dimensions for {grade_level} {subject}.",
            "Builds core competencies in critical thinking, communication, and collaboration.",
        ],
        segments=_segments(),
        differentiation=_differentiation(),
        materials=[
            "Curriculum-aligned handouts or digital slides.",
            f"Manipulatives or visual aids relevant to {topic}.",
            "Exit tickets or reflection sheets for assessment.",
        ],
        homework=(
            f"Assign a short consolidation task on {topic} that reinforces the lesson's "
            "success criteria and connects to the next topic."
        ),
        assessment=(
            "Use the exit tickets, guided questioning, and independent work samples "
            "to evaluate mastery against the learning objectives."
        ),
    )

    student_notes = StudentNotes(
        summary=(
            f"This lesson helps you understand {topic} in the context of {subject}. "
            "Expect to practise and apply skills through collaborative and independent activities."
        ),
        vocabulary=[
            VocabularyTerm(term="Key Term 1", definition=f"Provide the most essential definition linked to {topic}."),
            VocabularyTerm(term="Key Term 2", definition="Explain how this concept helps you solve real problems."),
            VocabularyTerm(term="Key Term 3", definition="Clarify how the idea connects to prior knowledge."),
        ],
        study_tips=[
            "Review the learning objectives and success criteria after class.",
            "Practise explaining the concept to a peer or family member using local examples.",
            "Create quick sketches, diagrams, or mnemonics to remember key ideas.",
        ],
        real_world_connections=[
            "Identify where the concept appears in your community or local industry.",
            "Discuss with family how this knowledge supports national development goals.",
            "Observe media or news stories that highlight the importance of this topic.",
        ],
    )

    feedback_report = FeedbackReport(
        teacher_summary=(
            "Learners engaged well with the lesson sequence and demonstrated growing "
            "confidence with guided practice tasks."
        ),
        strengths=[
            "Active participation during think-pair-share routines.",
            "Collaborative problem solving with respectful dialogue.",
            "Improved accuracy in independent tasks compared to the diagnostic starter.",
        ],
        next_steps=[
            "Revisit key vocabulary to deepen academic language use.",
            "Provide additional modelling for learners who require more scaffolding.",
            "Plan a follow-up project that applies the concept to community contexts.",
        ],
        parent_note=(
            f"Your child explored {topic} in {subject}. Encourage them to explain what "
            "they learned using examples from home or the community."
        ),
    )

    return LessonPackage(
        lesson_plan=lesson_plan,
        quiz=_quiz(topic),
        student_notes=student_notes,
        feedback_report=feedback_report,
        teaching_aids=_teaching_aids(topic, grade_level) if request.include_aids else None,
        metadata=PackageMetadata(
            generated_at=generated_at,
            model=FALLBACK_MODEL,
            tone=request.resolved_tone,
        ),
    )
