"""
Exam Practice Coach - Question Drafter Tests
"""
import pytest

from app.ai.question_drafter import draft_questions, marks_from_pattern
from app.schemas.practice import PracticeRequest, StyleSummary


def _request(**overrides) -> PracticeRequest:
    data = {
        "subject": "data structures",
        "topic": "AVL trees",
        "question_type": "subjective",
        "difficulty": "medium",
        "num_questions": 3,
    }
    data.update(overrides)
    return PracticeRequest(**data)


@pytest.mark.parametrize("count", [1, 3, 20])
def test_drafts_exact_count_with_sequential_ids(count):
    questions = draft_questions(_request(num_questions=count))
    assert [q.id for q in questions] == [f"q{i}" for i in range(1, count + 1)]
    assert all(q.difficulty == "medium" for q in questions)


def test_default_marks_follow_difficulty():
    assert {q.marks for q in draft_questions(_request(difficulty="easy"))} == {5}
    assert {q.marks for q in draft_questions(_request(difficulty="hard"))} == {15}


def test_marks_pattern_cycles():
    questions = draft_questions(_request(num_questions=5, marks_pattern="5, 10 and 15 marks"))
    assert [q.marks for q in questions] == [5, 10, 15, 5, 10]


def test_style_summary_supplies_verbs_and_marks():
    summary = StyleSummary(common_verbs=["prove", "derive"], average_marks_per_question=12)
    questions = draft_questions(_request(style_summary=summary))
    assert questions[0].text.startswith("Prove how AVL trees fits within Data structures")
    assert questions[1].text.startswith("Derive")
    assert questions[2].text.startswith("Prove")
    assert {q.marks for q in questions} == {12}


def test_numerical_questions_ask_for_calculations():
    questions = draft_questions(_request(question_type="numerical"))
    assert "calculations" in questions[0].text


def test_marks_from_pattern():
    assert marks_from_pattern("") == []
    assert marks_from_pattern(None) == []
    assert marks_from_pattern("0, 5 x 2") == [5, 2]
