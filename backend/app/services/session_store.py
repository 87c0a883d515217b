"""
Exam Practice Coach - Practice Session Store
In-memory session state for generated questions and evaluated answers.
Nothing is persisted; the least recently used session is evicted when full.
"""
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from app.core.errors import ValidationError
from app.schemas.practice import Evaluation, PracticeRequest, Question, StudentAnswer


@dataclass
class PracticeSession:
    """Questions of one practice session and the answers given so far."""
    session_id: str
    request: PracticeRequest
    questions: List[Question]
    answers: Dict[str, StudentAnswer] = field(default_factory=dict)

    def question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    def record(self, question_id: str, answer_text: str, evaluation: Evaluation) -> StudentAnswer:
        """Attach an evaluation to this session, replacing any earlier one."""
        answer = StudentAnswer(
            question_id=question_id,
            answer_text=answer_text,
            evaluation=evaluation,
        )
        self.answers[question_id] = answer
        return answer


class PracticeSessionStore:
    """Bounded LRU store of practice sessions keyed by session id."""

    def __init__(self, max_sessions: int = 500):
        self.max_sessions = max(1, max_sessions)
        self._sessions: "OrderedDict[str, PracticeSession]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, request: PracticeRequest, questions: List[Question]) -> PracticeSession:
        session = PracticeSession(
            session_id=str(uuid.uuid4()),
            request=request,
            questions=list(questions),
        )
        self._sessions[session.session_id] = session
        while len(self._sessions) > self.max_sessions:
            self._sessions.popitem(last=False)
        return session

    def get(self, session_id: str) -> Optional[PracticeSession]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def require_question(self, session_id: str, question_id: str) -> PracticeSession:
        """
        Look up a session that contains the question.

        Raises:
            ValidationError: If the session or the question is unknown.
        """
        session = self.get(session_id)
        if session is None:
            raise ValidationError(f"Unknown practice session: {session_id}")
        if session.question(question_id) is None:
            raise ValidationError(f"Question {question_id} is not part of session {session_id}")
        return session

    def record_evaluation(
        self,
        session_id: str,
        question_id: str,
        answer_text: str,
        evaluation: Evaluation,
    ) -> StudentAnswer:
        """Attach an evaluation to the session, replacing any earlier one."""
        session = self.require_question(session_id, question_id)
        return session.record(question_id, answer_text, evaluation)
