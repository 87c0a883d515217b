"""
Exam Practice Coach - Heuristic Scorer Tests
"""
import pytest

from app.ai.heuristic_scorer import score_answer, verdict_for_ratio
from app.schemas.practice import Verdict


SUBJECT = "Data Structures"
TOPIC = "AVL Trees"


def _sixty_word_answer() -> str:
    opening = "AVL Trees rebalance after insertion so we derive height bounds"
    return " ".join([opening] + ["rotation"] * 50)


def test_sixty_word_answer_with_topic_scores_well():
    answer = _sixty_word_answer()
    assert len(answer.split()) == 60

    evaluation = score_answer(SUBJECT, TOPIC, answer, max_score=10)

    assert evaluation.score >= 6
    assert evaluation.verdict in (Verdict.FULLY_CORRECT.value, Verdict.MOSTLY_CORRECT.value)
    assert "Used appropriate academic language." in evaluation.strengths
    assert "Referenced the core subject/topic." in evaluation.strengths


def test_scoring_is_deterministic():
    answer = _sixty_word_answer()
    assert score_answer(SUBJECT, TOPIC, answer) == score_answer(SUBJECT, TOPIC, answer)


@pytest.mark.parametrize("answer", [
    "x",
    "Trees.",
    "data structures and avl trees " * 200,
    "A short but relevant note on AVL trees.",
])
@pytest.mark.parametrize("max_score", [1, 5, 10, 15])
def test_score_stays_within_bounds(answer, max_score):
    evaluation = score_answer(SUBJECT, TOPIC, answer, max_score=max_score)
    assert 1 <= evaluation.score <= max_score
    assert evaluation.max_score == max_score


def test_minimal_answer_never_scores_zero():
    evaluation = score_answer(SUBJECT, TOPIC, "no", max_score=10)
    assert evaluation.score == 1
    assert evaluation.verdict == Verdict.INCORRECT.value


def test_short_off_topic_answer_feedback():
    evaluation = score_answer(SUBJECT, TOPIC, "It depends on the input.", max_score=10)
    assert evaluation.strengths == ["Answer is concise and to the point."]
    assert "Expand your reasoning with more supporting details." in evaluation.weaknesses
    assert "Explicitly mention AVL Trees or related terminology." in evaluation.weaknesses
    statuses = {c.concept: c.status for c in evaluation.concept_comparison}
    assert statuses == {"Definition": "partial", "Key steps": "partial", "Applications": "missing"}


def test_lists_are_never_empty():
    evaluation = score_answer(SUBJECT, TOPIC, "Balanced.", max_score=10)
    assert evaluation.strengths
    assert evaluation.weaknesses
    assert len(evaluation.concept_comparison) == 3
    assert TOPIC in evaluation.ideal_answer


@pytest.mark.parametrize("ratio,verdict", [
    (1.0, Verdict.FULLY_CORRECT),
    (0.86, Verdict.FULLY_CORRECT),
    (0.85, Verdict.MOSTLY_CORRECT),
    (0.61, Verdict.MOSTLY_CORRECT),
    (0.6, Verdict.PARTIALLY_CORRECT),
    (0.41, Verdict.PARTIALLY_CORRECT),
    (0.4, Verdict.INCORRECT),
    (0.0, Verdict.INCORRECT),
])
def test_verdict_thresholds(ratio, verdict):
    assert verdict_for_ratio(ratio) is verdict
