# AI Agents Package - Specialized Agents for the practice pipeline
from app.ai.agents.base import BaseAgent, AgentContext, AgentResult, AgentState
from app.ai.agents.examiner import ExaminerAgent
from app.ai.agents.grader import GraderAgent

__all__ = [
    # Base
    "BaseAgent",
    "AgentContext",
    "AgentResult",
    "AgentState",

    # Specialized Agents
    "ExaminerAgent",
    "GraderAgent",
]
