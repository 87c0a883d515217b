"""
Exam Practice Coach - Question Drafter
Template-based questions for sessions without a configured model.
"""
import re
from typing import List

from app.schemas.practice import PracticeRequest, Question


DEFAULT_VERBS = ["Explain", "Discuss", "Derive", "Compare"]
DEFAULT_MARKS = {"easy": 5, "medium": 10, "hard": 15}


def marks_from_pattern(pattern: str) -> List[int]:
    """Positive integers mentioned in a marks pattern such as "2x5, 1x10"."""
    if not pattern:
        return []
    return [int(number) for number in re.findall(r"\d+", pattern) if int(number) > 0]


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:] if value else value


def draft_questions(request: PracticeRequest) -> List[Question]:
    """Draft exactly num_questions questions with ids q1..qN."""
    summary = request.style_summary
    verbs = [_capitalize(verb.strip()) for verb in (summary.common_verbs if summary else []) if verb.strip()]
    verbs = verbs or DEFAULT_VERBS

    marks_list = marks_from_pattern(request.marks_pattern)
    if not marks_list:
        if summary is not None:
            marks_list = [max(1, round(summary.average_marks_per_question))]
        else:
            marks_list = [DEFAULT_MARKS[request.difficulty]]

    focus = "calculations" if request.question_type == "numerical" else "theoretical insights"
    style = (request.exam_style or "generic").lower()

    questions = []
    for index in range(request.num_questions):
        verb = verbs[index % len(verbs)]
        text = (
            f"{verb} how {_capitalize(request.topic)} fits within {_capitalize(request.subject)} "
            f"at an undergraduate level. Highlight any {focus} and follow {style} exam phrasing."
        )
        questions.append(Question(
            id=f"q{index + 1}",
            text=text,
            marks=marks_list[index % len(marks_list)],
            difficulty=request.difficulty,
        ))
    return questions
