"""
Exam Practice Coach - Heuristic Scorer
Deterministic answer scoring used when no model is configured.
No network I/O; the same input always yields the same evaluation.
"""
import math
from typing import List

from app.schemas.practice import ConceptComparison, Evaluation, Verdict


# Ratio thresholds, checked in order; anything at or below the last is Incorrect
VERDICT_THRESHOLDS = [
    (0.85, Verdict.FULLY_CORRECT),
    (0.6, Verdict.MOSTLY_CORRECT),
    (0.4, Verdict.PARTIALLY_CORRECT),
]

ACADEMIC_TERMS = ("balance", "derive")


def verdict_for_ratio(ratio: float) -> Verdict:
    """Map score / max score to a verdict bucket."""
    for threshold, verdict in VERDICT_THRESHOLDS:
        if ratio > threshold:
            return verdict
    return Verdict.INCORRECT


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _strengths(word_count: int, keyword_hits: int, answer_lower: str) -> List[str]:
    strengths = []
    if word_count > 60:
        strengths.append("Provided a detailed narrative.")
    if keyword_hits > 0:
        strengths.append("Referenced the core subject/topic.")
    if any(term in answer_lower for term in ACADEMIC_TERMS):
        strengths.append("Used appropriate academic language.")
    if not strengths:
        strengths.append("Answer is concise and to the point.")
    return strengths


def _weaknesses(word_count: int, keyword_hits: int, topic: str) -> List[str]:
    weaknesses = []
    if word_count < 40:
        weaknesses.append("Expand your reasoning with more supporting details.")
    if keyword_hits == 0:
        weaknesses.append(f"Explicitly mention {topic} or related terminology.")
    weaknesses.append("Include numeric values or diagrams where relevant.")
    return weaknesses


def score_answer(
    subject: str,
    topic: str,
    student_answer: str,
    max_score: int = 10,
) -> Evaluation:
    """
    Score an answer from its length, keyword coverage and clarity.

    ratio = min(words / 50, 1) * 0.5
          + (keyword hits / 2) * 0.3
          + min(chars / 400, 1) * 0.2

    The score is ratio * max_score rounded half up, never below 1 and never
    above max_score.
    """
    answer = student_answer.strip()
    answer_lower = answer.lower()

    word_count = len(answer.split())
    keywords = [value.lower() for value in (topic, subject) if value and value.strip()]
    keyword_hits = sum(1 for keyword in keywords if keyword in answer_lower)

    length_score = min(word_count / 50, 1) * 0.5
    keyword_score = (keyword_hits / 2) * 0.3
    clarity_score = min(len(answer) / 400, 1) * 0.2
    ratio = length_score + keyword_score + clarity_score

    score = min(max(1, _round_half_up(ratio * max_score)), max_score)

    concept_comparison = [
        ConceptComparison(concept="Definition", status="covered" if word_count > 30 else "partial"),
        ConceptComparison(concept="Key steps", status="covered" if word_count > 60 else "partial"),
        ConceptComparison(concept="Applications", status="covered" if keyword_hits > 0 else "missing"),
    ]

    return Evaluation(
        score=score,
        max_score=max_score,
        verdict=verdict_for_ratio(score / max_score).value,
        strengths=_strengths(word_count, keyword_hits, answer_lower),
        weaknesses=_weaknesses(word_count, keyword_hits, topic),
        ideal_answer=(
            f"An undergraduate-level answer should define {topic}, explain how it "
            f"operates within {subject}, state the key assumptions and steps involved, "
            "and close with its complexity, limitations or applications."
        ),
        concept_comparison=concept_comparison,
    )
