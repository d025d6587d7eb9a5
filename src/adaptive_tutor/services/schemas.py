"""Pydantic schemas for model output.

Model replies are first recovered with
:func:`~adaptive_tutor.infrastructure.parsing.parse_llm_json`, then
validated against these schemas before being converted into domain value
objects.  Field aliases follow the camelCase keys the prompts ask for;
scalars and list items are coerced to strings because models are loose
about types.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "\n".join(_as_text(v) for v in value)
    if isinstance(value, dict):
        return "; ".join(f"{k}: {_as_text(v)}" for k, v in value.items())
    return str(value)


def _as_text_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (str, int, float)):
        return [str(value)]
    return [_as_text(v) for v in value]


Text = Annotated[str, BeforeValidator(_as_text)]
TextList = Annotated[list[str], BeforeValidator(_as_text_list)]


class _ModelOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# -- planning -----------------------------------------------------------------


class SubtopicOutput(_ModelOutput):
    """One subtopic of the map."""

    id: Text = Field(default="", description="Short identifier, e.g. s1")
    name: Text = Field(default="", description="Subtopic name")
    prerequisites: TextList = Field(default_factory=list, description="Prerequisite ids")


class SubtopicMapOutput(_ModelOutput):
    """Subject -> subtopic map."""

    subtopics: list[SubtopicOutput]


class WeaknessOutput(_ModelOutput):
    """Weak / strong / critical concept classification."""

    weak_concepts: TextList = Field(default_factory=list, alias="weakConcepts")
    strong_concepts: TextList = Field(default_factory=list, alias="strongConcepts")
    critical_failures: TextList = Field(default_factory=list, alias="criticalFailures")
    primary_focus: Text = Field(default="", alias="primaryFocus")


class CurriculumEntryOutput(_ModelOutput):
    """One lesson slot."""

    lesson_id: Text = Field(default="", alias="lessonId")
    title: Text = ""
    subtopic: Text = ""
    estimated_time: float = Field(default=0, alias="estimatedTime")
    skills_targeted: TextList = Field(default_factory=list, alias="skillsTargeted")


class CurriculumDraftOutput(_ModelOutput):
    curriculum: list[CurriculumEntryOutput]


class OptimizedCurriculumOutput(_ModelOutput):
    optimized_curriculum: list[CurriculumEntryOutput] = Field(alias="optimizedCurriculum")


class ValidatedCurriculumOutput(_ModelOutput):
    final_curriculum: list[CurriculumEntryOutput] = Field(alias="finalCurriculum")
    notes: Text = ""


# -- lesson -------------------------------------------------------------------


class LessonExampleOutput(_ModelOutput):
    header: Text = ""
    steps: TextList = Field(default_factory=list)


class LessonOutput(_ModelOutput):
    """A structured lesson."""

    lesson_id: Text = Field(default="", alias="lessonId")
    title: Text
    subtopic: Text = ""
    level: Text = ""
    objectives: TextList = Field(default_factory=list)
    explanation: Text
    examples: list[LessonExampleOutput] = Field(default_factory=list)
    mini_check: Text = Field(default="", alias="miniCheck")
    practice_problems: TextList = Field(default_factory=list, alias="practiceProblems")
    ascii_visual: Text = Field(default="", alias="asciiVisual")


# -- quiz ---------------------------------------------------------------------


class QuizQuestionOutput(_ModelOutput):
    """A four-option multiple-choice question."""

    id: Text = ""
    concept: Text
    question: Text
    options: TextList = Field(min_length=4, max_length=4)
    correct_option_index: int = Field(ge=0, le=3, alias="correctOptionIndex")


class QuizOutput(_ModelOutput):
    quiz_id: Text = Field(default="", alias="quizId")
    questions: list[QuizQuestionOutput]


class EvaluationOutput(_ModelOutput):
    """Analysis half of quiz evaluation; grading itself is done locally."""

    updated_mastery: dict[str, float] = Field(default_factory=dict, alias="updatedMastery")
    recommendations: TextList = Field(default_factory=list)


# -- follow-up problems -------------------------------------------------------


class ProblemOutput(_ModelOutput):
    problem: Text
    topic: Text = ""
    difficulty: Text = "medium"
    hint: Text | None = None


class ProblemSetOutput(_ModelOutput):
    problems: list[ProblemOutput] = Field(min_length=1)
