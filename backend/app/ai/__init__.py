"""
Exam Practice Coach - AI Module Initialization
Prompt building, reply validation, scoring and the model-backed agents.
"""
from app.ai.agents import (
    BaseAgent,
    AgentContext,
    AgentResult,
    AgentState,
    ExaminerAgent,
    GraderAgent,
)
from app.ai.core.llm import ModelClient, ModelResponse, SdkClient, RestClient, build_model_client
from app.ai.heuristic_scorer import score_answer
from app.ai.parsing import extract_json_object, parse_evaluation, parse_question_list
from app.ai.prompts import build_evaluation_prompt, build_question_prompt
from app.ai.question_drafter import draft_questions

__all__ = [
    # Agents
    "BaseAgent",
    "AgentContext",
    "AgentResult",
    "AgentState",
    "ExaminerAgent",
    "GraderAgent",

    # Model clients
    "ModelClient",
    "ModelResponse",
    "SdkClient",
    "RestClient",
    "build_model_client",

    # Pipeline
    "build_question_prompt",
    "build_evaluation_prompt",
    "extract_json_object",
    "parse_evaluation",
    "parse_question_list",
    "score_answer",
    "draft_questions",
]
