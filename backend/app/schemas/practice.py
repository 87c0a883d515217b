"""
Exam Practice Coach - Practice Schemas
Pydantic schemas for practice sessions, questions and evaluations.
Wire format is camelCase; attributes are snake_case.
"""
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


QuestionType = Literal["subjective", "numerical", "mixed"]
Difficulty = Literal["easy", "medium", "hard"]
ConceptStatus = Literal["covered", "partial", "missing", "wrong"]

CONCEPT_STATUSES = ("covered", "partial", "missing", "wrong")


class Verdict(str, Enum):
    """Grade buckets, best first."""
    FULLY_CORRECT = "Fully correct"
    MOSTLY_CORRECT = "Mostly correct"
    PARTIALLY_CORRECT = "Partially correct"
    INCORRECT = "Incorrect"
    OFF_TOPIC = "Off-topic"


class CamelModel(BaseModel):
    """Base model serialising to camelCase JSON."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _require_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class StyleSummary(CamelModel):
    """Phrasing and marks statistics extracted from past papers."""
    common_verbs: list[str] = Field(default_factory=list)
    average_marks_per_question: float = Field(default=10, gt=0)
    typical_difficulty: Difficulty = "medium"
    total_marks: Optional[int] = None
    question_count: Optional[int] = None
    style_notes: Optional[str] = None


class PracticeRequest(CamelModel):
    """Configuration for a practice exam session."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    subject: str = Field(..., min_length=1, max_length=200)
    topic: str = Field(..., min_length=1, max_length=200)
    question_type: QuestionType
    difficulty: Difficulty
    num_questions: int = Field(..., ge=1, le=20, description="Number of questions (1-20)")
    exam_style: Optional[str] = Field(default=None, max_length=500)
    marks_pattern: Optional[str] = Field(default=None, max_length=200)
    style_summary: Optional[StyleSummary] = None

    strip_required = field_validator("subject", "topic")(_require_text)


class Question(CamelModel):
    """A generated practice question."""
    id: str
    text: str
    marks: Optional[int] = None
    difficulty: Difficulty


class ConceptComparison(CamelModel):
    """Coverage tag for one key concept."""
    concept: str
    status: ConceptStatus


class Evaluation(CamelModel):
    """Structured evaluation of one answer."""
    score: Union[int, float]
    max_score: Union[int, float]
    verdict: str
    strengths: list[str]
    weaknesses: list[str]
    ideal_answer: str
    concept_comparison: list[ConceptComparison]


class EvaluateAnswerRequest(CamelModel):
    """Request to evaluate a single answer."""
    subject: str = Field(..., min_length=1, max_length=200)
    topic: str = Field(..., min_length=1, max_length=200)
    question_id: str = Field(..., min_length=1, max_length=50)
    question_text: str = Field(..., min_length=1, max_length=5000)
    student_answer: str = Field(..., max_length=20000)
    difficulty: Difficulty
    marks: int = Field(default=10, ge=1, le=100)
    session_id: Optional[str] = None

    strip_required = field_validator(
        "subject", "topic", "question_id", "question_text", "student_answer"
    )(_require_text)


class EvaluateAnswerResponse(Evaluation):
    """Evaluation returned for a specific question."""
    question_id: str


class GenerateQuestionsResponse(CamelModel):
    """Questions for a new practice session."""
    questions: list[Question]
    session_id: str


class BatchEvaluateRequest(CamelModel):
    """
    Evaluate several answers in one call ("validate all").

    Items are validated one by one so that a blank answer fails only its own item.
    """
    items: list[dict[str, Any]] = Field(..., min_length=1, max_length=20)


class BatchEvaluationItem(CamelModel):
    """Outcome for one answer of a batch; evaluation or error is set."""
    question_id: str
    evaluation: Optional[Evaluation] = None
    error: Optional[str] = None
    error_id: Optional[str] = None


class BatchEvaluateResponse(CamelModel):
    """Per-answer outcomes in request order."""
    results: list[BatchEvaluationItem]


class UploadPapersResponse(CamelModel):
    """Placeholder style analysis of uploaded papers."""
    style_summary: StyleSummary
    file_count: int
    file_names: list[str]


class StudentAnswer(CamelModel):
    """An answer held in a practice session."""
    question_id: str
    answer_text: str
    evaluation: Optional[Evaluation] = None


class PracticeSessionResponse(CamelModel):
    """Snapshot of an in-memory practice session."""
    session_id: str
    request: PracticeRequest
    questions: list[Question]
    answers: list[StudentAnswer]
