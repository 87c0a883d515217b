"""
Exam Practice Coach - Base Agent
Abstract base class for the AI agents of the practice pipeline.
"""
import uuid
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
from dataclasses import dataclass, field
from enum import Enum

from app.ai.core.llm import ModelClient
from app.ai.core.telemetry import get_tracer


class AgentState(Enum):
    """Agent execution states."""
    IDLE = "idle"
    PLANNING = "planning"
    EXECUTING = "executing"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class AgentContext:
    """Context passed to agent during execution."""
    session_id: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AgentResult:
    """Result from agent execution."""
    success: bool
    output: Any
    state: AgentState
    metadata: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    exception: Optional[Exception] = None

    def unwrap(self) -> Any:
        """Return the output, re-raising the original failure if there was one."""
        if self.success:
            return self.output
        if self.exception is not None:
            raise self.exception
        raise RuntimeError(self.error or "Agent execution failed")


class BaseAgent(ABC):
    """
    Abstract base class for AI Agents.

    Each agent follows the Plan-Execute pattern:
    1. plan() - Validate input and prepare the prompt
    2. execute() - Call the model and validate its reply

    The model client is created once at startup and injected.
    """

    # Agent metadata (override in subclasses)
    name: str = "BaseAgent"
    description: str = "Base agent class"
    version: str = "1.0.0"

    def __init__(self, model_client: ModelClient):
        """
        Initialize the agent.

        Args:
            model_client: Shared model client for this process.
        """
        self.llm = model_client
        self._state = AgentState.IDLE

    @property
    def state(self) -> AgentState:
        """Get current agent state."""
        return self._state

    @abstractmethod
    async def plan(self, context: AgentContext) -> Dict[str, Any]:
        """
        Planning phase: Determine what actions to take.

        Args:
            context: The agent context with request metadata.

        Returns:
            A plan dictionary with actions to execute.
        """

    @abstractmethod
    async def execute(self, context: AgentContext, plan: Dict[str, Any]) -> AgentResult:
        """
        Execution phase: Perform the planned actions.

        Failures propagate as exceptions; run() records them on the result.
        """

    async def run(
        self,
        metadata: Dict[str, Any],
        session_id: Optional[str] = None,
    ) -> AgentResult:
        """
        Run the plan-execute cycle.

        Args:
            metadata: The request parameters for this run.
            session_id: Optional practice session id for tracing.

        Returns:
            AgentResult with the final output, or the failure that stopped it.
        """
        tracer = get_tracer()

        with tracer.start_as_current_span(f"{self.name}.run") as span:
            span.set_attribute("agent.name", self.name)
            span.set_attribute("agent.version", self.version)

            session_id = session_id or str(uuid.uuid4())
            span.set_attribute("session.id", session_id)
            context = AgentContext(session_id=session_id, metadata=metadata)

            try:
                self._state = AgentState.PLANNING
                with tracer.start_as_current_span(f"{self.name}.plan"):
                    plan = await self.plan(context)

                self._state = AgentState.EXECUTING
                with tracer.start_as_current_span(f"{self.name}.execute"):
                    result = await self.execute(context, plan)

                span.add_event("execution_completed", {"success": result.success})
                self._state = AgentState.COMPLETED
                return result

            except Exception as e:
                self._state = AgentState.ERROR
                span.record_exception(e)

                return AgentResult(
                    success=False,
                    output=None,
                    state=AgentState.ERROR,
                    error=str(e),
                    exception=e,
                )

    def __repr__(self) -> str:
        return f"<{self.name} v{self.version} state={self.state.value}>"
