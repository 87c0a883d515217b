"""
Exam Practice Coach - Test Configuration
Pytest fixtures and configuration for testing
"""
import json
from collections.abc import AsyncGenerator, Callable
from typing import Any, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.ai.core.llm import ModelClient, ModelResponse
from app.core.config import Settings
from app.main import create_app


class FakeModelClient(ModelClient):
    """
    Scripted model client.

    Each reply is a string, an exception instance to raise, or a callable
    taking the prompt. The last reply repeats once the script runs out.
    """

    transport = "fake"

    def __init__(self, settings: Settings, replies: list):
        super().__init__(settings)
        self.replies = list(replies)
        self.prompts: list[str] = []

    async def _invoke(self, prompt: str) -> ModelResponse:
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if callable(reply):
            reply = reply(prompt)
        if isinstance(reply, Exception):
            raise reply
        return ModelResponse(content=reply, model=self.model, tokens_prompt=10, tokens_completion=20)


def make_settings(**overrides: Any) -> Settings:
    """Settings isolated from the environment and any .env file."""
    values = {
        "OPENAI_API_KEY": "",
        "ANTHROPIC_API_KEY": "",
        "LLM_PROVIDER": "openai",
        "LLM_TRANSPORT": "sdk",
        "GENERATION_MODE": "auto",
        "EVALUATION_MODE": "auto",
        "SCORE_OUT_OF_RANGE_POLICY": "reject",
        "BATCH_EVALUATION_MODE": "concurrent",
        "LLM_MAX_RETRIES": 2,
        "LLM_RETRY_BACKOFF_SECONDS": 0,
        "OTEL_ENABLED": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def evaluation_reply(score: float = 8, max_score: float = 10, **overrides: Any) -> str:
    """A well-formed evaluation reply as a model would send it."""
    payload = {
        "score": score,
        "maxScore": max_score,
        "verdict": "Mostly correct",
        "strengths": ["Defines the balance factor", "Mentions rotations"],
        "weaknesses": ["No complexity analysis"],
        "idealAnswer": "An AVL tree is a self-balancing binary search tree...",
        "conceptComparison": [
            {"concept": "Balance factor", "status": "covered"},
            {"concept": "Rotations", "status": "partial"},
            {"concept": "Height bound", "status": "missing"},
        ],
    }
    payload.update(overrides)
    return f"Here is the evaluation:\n```json\n{json.dumps(payload)}\n```"


def questions_reply(count: int, marks: int = 10) -> str:
    """A well-formed question generation reply."""
    return json.dumps({
        "questions": [
            {"id": f"q{i + 1}", "text": f"Question number {i + 1} about AVL trees?", "marks": marks}
            for i in range(count)
        ]
    })


@pytest.fixture
def settings() -> Settings:
    """Settings with no model credential (local fallbacks)."""
    return make_settings()


@pytest.fixture
def model_settings() -> Settings:
    """Settings with a model credential."""
    return make_settings(OPENAI_API_KEY="sk-test")


@pytest.fixture
def fake_model(model_settings: Settings) -> Callable[..., FakeModelClient]:
    """Factory for scripted model clients."""
    def factory(*replies: Any) -> FakeModelClient:
        return FakeModelClient(model_settings, list(replies))
    return factory


@pytest_asyncio.fixture(scope="function")
async def client(settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """Test client for an application using the heuristic fallbacks."""
    app = create_app(settings=settings)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def make_client(model_settings: Settings):
    """Factory for test clients backed by a given model client."""
    clients: list[AsyncClient] = []

    async def factory(model_client: Optional[ModelClient], settings: Optional[Settings] = None) -> AsyncClient:
        app = create_app(settings=settings or model_settings, model_client=model_client)
        ac = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(ac)
        return ac

    yield factory

    for ac in clients:
        await ac.aclose()


@pytest.fixture
def practice_request_data() -> dict[str, Any]:
    """Sample practice configuration."""
    return {
        "subject": "Data Structures",
        "topic": "AVL Trees",
        "questionType": "subjective",
        "difficulty": "medium",
        "numQuestions": 3,
    }


@pytest.fixture
def evaluate_request_data() -> dict[str, Any]:
    """Sample answer evaluation request."""
    return {
        "subject": "Data Structures",
        "topic": "AVL Trees",
        "questionId": "q1",
        "questionText": "Explain how AVL Trees stay balanced after insertion.",
        "studentAnswer": "AVL Trees track a balance factor and rotate nodes when it leaves -1..1.",
        "difficulty": "medium",
        "marks": 10,
    }
