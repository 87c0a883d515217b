"""
Exam Practice Coach - Paper Style Summary
Placeholder analysis of uploaded exam papers. The files are never parsed;
the summary is a deterministic function of their count and size.
"""
from dataclasses import dataclass
from typing import List

from app.core.errors import ValidationError
from app.schemas.practice import StyleSummary


COMMON_VERBS = ["analyze", "explain", "calculate", "derive", "prove", "discuss"]

EASY_MAX_AVERAGE_BYTES = 200 * 1024
MEDIUM_MAX_AVERAGE_BYTES = 1024 * 1024

MARKS_BY_DIFFICULTY = {"easy": 5, "medium": 10, "hard": 15}


@dataclass(frozen=True)
class UploadedPaper:
    """Name and size of an uploaded paper."""
    file_name: str
    size_bytes: int


def summarize_papers(papers: List[UploadedPaper]) -> StyleSummary:
    """
    Build a style summary for the uploaded papers.

    Raises:
        ValidationError: If no papers were supplied.
    """
    if not papers:
        raise ValidationError("No files provided")

    total_bytes = sum(paper.size_bytes for paper in papers)
    average_bytes = total_bytes / len(papers)

    if average_bytes < EASY_MAX_AVERAGE_BYTES:
        difficulty = "easy"
    elif average_bytes < MEDIUM_MAX_AVERAGE_BYTES:
        difficulty = "medium"
    else:
        difficulty = "hard"

    average_marks = MARKS_BY_DIFFICULTY[difficulty]
    question_count = 8 + total_bytes % 5

    return StyleSummary(
        common_verbs=list(COMMON_VERBS),
        average_marks_per_question=average_marks,
        typical_difficulty=difficulty,
        total_marks=question_count * average_marks,
        question_count=question_count,
        style_notes=f"Style extracted from {len(papers)} exam paper(s)",
    )
