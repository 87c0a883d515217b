"""
Exam Practice Coach - Grader Agent
Evaluates free-text answers through the model with strict reply validation.
"""
import logging
from typing import Dict, Any, Optional

from app.ai.agents.base import BaseAgent, AgentContext, AgentResult, AgentState
from app.ai.core.llm import ModelClient
from app.ai.core.telemetry import agent_span
from app.ai.parsing import extract_json_object, parse_evaluation
from app.ai.prompts import DEFAULT_MAX_SCORE, build_evaluation_prompt
from app.core.errors import InvalidEvaluation
from app.schemas.practice import Evaluation

logger = logging.getLogger(__name__)


class GraderAgent(BaseAgent):
    """
    The Grader Agent

    Evaluates student answers with:
    - A score bounded by the question's marks
    - Strengths and weaknesses
    - An ideal answer
    - Per-concept coverage tags

    Uses the Plan-Execute pattern:
    - Plan: Render the sanitized evaluation prompt
    - Execute: Call the model, parse the reply, apply the score policy
    """

    name = "GraderAgent"
    description = "Evaluates undergraduate free-text answers"
    version = "3.0.0"

    def __init__(self, model_client: ModelClient, score_policy: str = "reject"):
        super().__init__(model_client)
        self.score_policy = score_policy

    async def plan(self, context: AgentContext) -> Dict[str, Any]:
        params = context.metadata
        max_score = params.get("max_score") or DEFAULT_MAX_SCORE
        return {
            "action": "evaluate_answer",
            "max_score": max_score,
            "prompt": build_evaluation_prompt(
                subject=params["subject"],
                topic=params["topic"],
                question_text=params["question_text"],
                student_answer=params["student_answer"],
                difficulty=params["difficulty"],
                max_score=max_score,
            ),
        }

    async def execute(self, context: AgentContext, plan: Dict[str, Any]) -> AgentResult:
        attributes = {
            "evaluation.subject": context.metadata["subject"],
            "evaluation.topic": context.metadata["topic"],
            "evaluation.max_score": plan["max_score"],
        }

        with agent_span("evaluate_answer", self.name, attributes) as span:
            response = await self.llm.complete(plan["prompt"], agent_name=self.name)
            evaluation = parse_evaluation(extract_json_object(response.content))
            evaluation = self._apply_score_policy(evaluation, plan["max_score"])

            span.set_attribute("evaluation.score", float(evaluation.score))
            span.set_attribute("evaluation.verdict", evaluation.verdict)

            return AgentResult(
                success=True,
                output=evaluation,
                state=AgentState.COMPLETED,
                metadata={"model": response.model, "tokens": response.tokens_total},
            )

    def _apply_score_policy(self, evaluation: Evaluation, max_score: int) -> Evaluation:
        """
        Bind the evaluation to the requested marks.

        The requested max score is authoritative. An out-of-range score is
        rejected under the "reject" policy and clamped under "clamp".
        """
        if evaluation.max_score != max_score:
            logger.warning(
                "Model reported maxScore %s for a %s-mark question", evaluation.max_score, max_score
            )

        score = evaluation.score
        if not 0 <= score <= max_score:
            if self.score_policy != "clamp":
                raise InvalidEvaluation(
                    "score",
                    f"Score {score} outside the range 0..{max_score}",
                )
            logger.warning("Clamping out-of-range score %s to 0..%s", score, max_score)
            score = min(max(score, 0), max_score)

        return evaluation.model_copy(update={"score": score, "max_score": max_score})

    async def evaluate(
        self,
        subject: str,
        topic: str,
        question_text: str,
        student_answer: str,
        difficulty: str,
        max_score: int = DEFAULT_MAX_SCORE,
        session_id: Optional[str] = None,
    ) -> Evaluation:
        """Evaluate one answer, raising the pipeline error on failure."""
        result = await self.run(
            metadata={
                "subject": subject,
                "topic": topic,
                "question_text": question_text,
                "student_answer": student_answer,
                "difficulty": difficulty,
                "max_score": max_score,
            },
            session_id=session_id,
        )
        return result.unwrap()
