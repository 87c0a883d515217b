"""
Exam Practice Coach - Practice Service
Chooses between the model-backed agents and the local fallbacks, and keeps
practice session state in step with generated questions and evaluations.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import pydantic

from app.ai.agents.examiner import ExaminerAgent
from app.ai.agents.grader import GraderAgent
from app.ai.core.llm import ModelClient
from app.ai.heuristic_scorer import score_answer
from app.ai.question_drafter import draft_questions
from app.core.config import Settings
from app.core.errors import ValidationError, describe_validation_errors, log_error
from app.schemas.practice import (
    BatchEvaluationItem,
    EvaluateAnswerRequest,
    Evaluation,
    PracticeRequest,
    Question,
)
from app.services.session_store import PracticeSession, PracticeSessionStore

logger = logging.getLogger(__name__)

BATCH_ITEM_ERROR = "Failed to evaluate answer"


class PracticeService:
    """Question generation and answer evaluation for practice sessions."""

    def __init__(
        self,
        settings: Settings,
        model_client: Optional[ModelClient],
        store: PracticeSessionStore,
    ):
        if model_client is None and "llm" in (settings.GENERATION_MODE, settings.EVALUATION_MODE):
            raise ValueError(
                f"LLM mode requested but no API key is configured for {settings.LLM_PROVIDER}"
            )

        self.settings = settings
        self.store = store
        self.examiner: Optional[ExaminerAgent] = None
        self.grader: Optional[GraderAgent] = None

        if model_client is not None and settings.GENERATION_MODE != "stub":
            self.examiner = ExaminerAgent(model_client)
        if model_client is not None and settings.EVALUATION_MODE != "heuristic":
            self.grader = GraderAgent(model_client, score_policy=settings.SCORE_OUT_OF_RANGE_POLICY)

    @property
    def uses_model_generation(self) -> bool:
        return self.examiner is not None

    @property
    def uses_model_evaluation(self) -> bool:
        return self.grader is not None

    async def generate_questions(self, request: PracticeRequest) -> Tuple[PracticeSession, List[Question]]:
        """Generate the session's questions and open a practice session for them."""
        if self.examiner is not None:
            questions = await self.examiner.generate_questions(request)
        else:
            questions = draft_questions(request)

        session = self.store.create(request, questions)
        logger.info(
            "Created practice session %s with %d questions (%s)",
            session.session_id,
            len(questions),
            "model" if self.examiner is not None else "drafted",
        )
        return session, questions

    async def evaluate_answer(self, request: EvaluateAnswerRequest) -> Evaluation:
        """
        Evaluate one answer and record it on its session when one is given.

        For a session question the stored text and marks are graded against,
        not the ones in the request.

        Raises:
            ValidationError: If the session or question is unknown.
        """
        session: Optional[PracticeSession] = None
        question_text = request.question_text
        max_score = request.marks

        if request.session_id:
            session = self.store.require_question(request.session_id, request.question_id)
            question = session.question(request.question_id)
            if question.text != question_text or (question.marks and question.marks != max_score):
                logger.warning(
                    "Request for %s in session %s differs from the stored question; using the stored one",
                    request.question_id,
                    request.session_id,
                )
            question_text = question.text
            max_score = question.marks or max_score

        if self.grader is not None:
            evaluation = await self.grader.evaluate(
                subject=request.subject,
                topic=request.topic,
                question_text=question_text,
                student_answer=request.student_answer,
                difficulty=request.difficulty,
                max_score=max_score,
                session_id=request.session_id,
            )
        else:
            evaluation = score_answer(
                subject=request.subject,
                topic=request.topic,
                student_answer=request.student_answer,
                max_score=max_score,
            )

        # The session found above, even if the store evicted it meanwhile
        if session is not None:
            session.record(request.question_id, request.student_answer, evaluation)
        return evaluation

    async def _evaluate_item(self, raw: Dict[str, Any]) -> BatchEvaluationItem:
        question_id = raw.get("questionId") or raw.get("question_id") or ""
        if not isinstance(question_id, str):
            question_id = str(question_id)

        try:
            item = EvaluateAnswerRequest.model_validate(raw)
        except pydantic.ValidationError as e:
            return BatchEvaluationItem(question_id=question_id, error=describe_validation_errors(e.errors()))

        try:
            evaluation = await self.evaluate_answer(item)
        except ValidationError as e:
            return BatchEvaluationItem(question_id=item.question_id, error=str(e))
        except Exception as e:
            error_id = log_error(e, f"Error evaluating answer for {item.question_id}")
            return BatchEvaluationItem(
                question_id=item.question_id,
                error=BATCH_ITEM_ERROR,
                error_id=error_id,
            )
        return BatchEvaluationItem(question_id=item.question_id, evaluation=evaluation)

    async def evaluate_batch(self, items: List[Dict[str, Any]]) -> List[BatchEvaluationItem]:
        """
        Evaluate several answers, one outcome per item in request order.

        Each raw item is validated on its own; an invalid item (a blank
        answer, say) gets an error while the others are still graded.
        Items run concurrently under a semaphore, or one after another when
        BATCH_EVALUATION_MODE is "sequential". A failed item does not affect
        the others and is never recorded on the session.
        """
        if self.settings.BATCH_EVALUATION_MODE == "sequential":
            return [await self._evaluate_item(item) for item in items]

        semaphore = asyncio.Semaphore(max(1, self.settings.BATCH_MAX_CONCURRENCY))

        async def bounded(item: Dict[str, Any]) -> BatchEvaluationItem:
            async with semaphore:
                return await self._evaluate_item(item)

        return list(await asyncio.gather(*(bounded(item) for item in items)))
