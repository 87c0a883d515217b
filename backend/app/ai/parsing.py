"""
Exam Practice Coach - Model Response Parsing
Turns raw model text into validated evaluations and question lists.
Malformed replies are rejected loudly instead of being passed downstream.
"""
import json
import math
import re
from numbers import Real
from typing import Any, List

from app.core.errors import InvalidEvaluation, InvalidGeneration, MalformedResponse
from app.schemas.practice import CONCEPT_STATUSES, ConceptComparison, Evaluation, Question


_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


def extract_json_object(raw_text: str) -> str:
    """
    Extract the JSON object embedded in a model reply.

    A fenced code block (optionally tagged json) is unwrapped first, then the
    text from the first "{" to the last "}" inclusive is returned.

    Raises:
        MalformedResponse: If the reply holds no brace-delimited object.
    """
    if not raw_text:
        raise MalformedResponse("Model response was empty")

    fenced = _FENCED_BLOCK.search(raw_text)
    cleaned = fenced.group(1) if fenced else raw_text

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise MalformedResponse("Model response did not contain a JSON object")
    return cleaned[start:end + 1]


def _load_object(json_text: str, schema_error: type) -> dict:
    try:
        data = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Model response was not valid JSON: {e.msg}") from e
    if not isinstance(data, dict):
        raise schema_error("root", "Model response was not a JSON object")
    return data


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_string_list(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and all(isinstance(item, str) for item in value)
    )


def parse_evaluation(json_text: str) -> Evaluation:
    """
    Parse and validate an evaluation reply.

    Fields are checked in a fixed order and the first violation is reported.
    The score is not clamped; callers decide how to treat out-of-range values.

    Raises:
        MalformedResponse: On a JSON syntax error.
        InvalidEvaluation: Naming the first field that breaks the schema.
    """
    data = _load_object(json_text, InvalidEvaluation)

    if not _is_number(data.get("score")):
        raise InvalidEvaluation("score")
    if not _is_number(data.get("maxScore")):
        raise InvalidEvaluation("maxScore")
    if not _is_text(data.get("verdict")):
        raise InvalidEvaluation("verdict")
    if not _is_text(data.get("idealAnswer")):
        raise InvalidEvaluation("idealAnswer")
    if not _is_string_list(data.get("strengths")):
        raise InvalidEvaluation("strengths")
    if not _is_string_list(data.get("weaknesses")):
        raise InvalidEvaluation("weaknesses")

    concepts = data.get("conceptComparison")
    if not isinstance(concepts, list) or not concepts:
        raise InvalidEvaluation("conceptComparison")

    comparison = []
    for item in concepts:
        if (
            not isinstance(item, dict)
            or not isinstance(item.get("concept"), str)
            or not isinstance(item.get("status"), str)
        ):
            raise InvalidEvaluation("conceptComparison")
        status = item["status"].strip().lower()
        if status not in CONCEPT_STATUSES:
            raise InvalidEvaluation(
                "conceptComparison",
                f"Unknown concept status: {item['status']!r}",
            )
        comparison.append(ConceptComparison(concept=item["concept"], status=status))

    return Evaluation(
        score=data["score"],
        max_score=data["maxScore"],
        verdict=data["verdict"].strip(),
        strengths=data["strengths"],
        weaknesses=data["weaknesses"],
        ideal_answer=data["idealAnswer"],
        concept_comparison=comparison,
    )


def _coerce_marks(value: Any, index: int) -> int:
    """Accept positive integers, integral floats and numeric strings."""
    if isinstance(value, bool):
        raise InvalidGeneration(f"questions[{index}].marks")
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or value < 1:
        raise InvalidGeneration(f"questions[{index}].marks")
    return value


def parse_question_list(json_text: str, difficulty: str = "medium") -> List[Question]:
    """
    Parse and validate a question generation reply.

    Every item must carry a non-empty id and text; marks are optional.

    Raises:
        MalformedResponse: On a JSON syntax error.
        InvalidGeneration: If the questions array or an item is invalid.
    """
    data = _load_object(json_text, InvalidGeneration)

    items = data.get("questions")
    if not isinstance(items, list):
        raise InvalidGeneration("questions")

    questions = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise InvalidGeneration(f"questions[{index}]")
        if not _is_text(item.get("id")):
            raise InvalidGeneration(f"questions[{index}].id")
        if not _is_text(item.get("text")):
            raise InvalidGeneration(f"questions[{index}].text")

        marks = item.get("marks")
        questions.append(Question(
            id=item["id"].strip(),
            text=item["text"].strip(),
            marks=_coerce_marks(marks, index) if marks is not None else None,
            difficulty=difficulty,
        ))

    return questions
