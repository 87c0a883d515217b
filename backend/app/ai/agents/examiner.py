"""
Exam Practice Coach - Examiner Agent
Generates undergraduate practice questions for a practice request.
"""
import logging
from typing import Dict, Any, List, Optional

from app.ai.agents.base import BaseAgent, AgentContext, AgentResult, AgentState
from app.ai.core.telemetry import agent_span
from app.ai.parsing import extract_json_object, parse_question_list
from app.ai.prompts import build_question_prompt
from app.core.errors import InvalidGeneration
from app.schemas.practice import PracticeRequest, Question

logger = logging.getLogger(__name__)


class ExaminerAgent(BaseAgent):
    """
    The Examiner Agent

    Uses the Plan-Execute pattern:
    - Plan: Render the question prompt from the practice request
    - Execute: Call the model, parse the question list, enforce the count
    """

    name = "ExaminerAgent"
    description = "Generates undergraduate practice questions"
    version = "3.0.0"

    async def plan(self, context: AgentContext) -> Dict[str, Any]:
        request: PracticeRequest = context.metadata["request"]
        return {
            "action": "generate_questions",
            "prompt": build_question_prompt(request),
            "request": request,
        }

    async def execute(self, context: AgentContext, plan: Dict[str, Any]) -> AgentResult:
        request: PracticeRequest = plan["request"]

        attributes = {
            "practice.subject": request.subject,
            "practice.topic": request.topic,
            "practice.num_questions": request.num_questions,
        }

        with agent_span("generate_questions", self.name, attributes) as span:
            response = await self.llm.complete(plan["prompt"], agent_name=self.name)
            questions = parse_question_list(
                extract_json_object(response.content),
                difficulty=request.difficulty,
            )
            questions = self._normalize(questions, request.num_questions)
            span.set_attribute("practice.questions_returned", len(questions))

        return AgentResult(
            success=True,
            output=questions,
            state=AgentState.COMPLETED,
            metadata={"model": response.model, "tokens": response.tokens_total},
        )

    @staticmethod
    def _normalize(questions: List[Question], expected: int) -> List[Question]:
        """
        Keep the first `expected` questions and renumber them q1..qN.

        Raises:
            InvalidGeneration: If the model produced fewer questions than asked.
        """
        if len(questions) < expected:
            raise InvalidGeneration(
                "questions",
                f"Expected {expected} questions, model returned {len(questions)}",
            )
        if len(questions) > expected:
            logger.warning("Model returned %d questions, keeping %d", len(questions), expected)

        return [
            question.model_copy(update={"id": f"q{index + 1}"})
            for index, question in enumerate(questions[:expected])
        ]

    async def generate_questions(
        self,
        request: PracticeRequest,
        session_id: Optional[str] = None,
    ) -> List[Question]:
        """Generate exactly request.num_questions questions with ids q1..qN."""
        result = await self.run(metadata={"request": request}, session_id=session_id)
        return result.unwrap()
