"""
Exam Practice Coach - Model Client Tests
"""
import json

import httpx
import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage

from app.ai.core.llm import RestClient, SdkClient, build_model_client
from app.core.errors import MalformedResponse, UpstreamCallError
from conftest import make_settings


def _openai_body(content: str) -> dict:
    return {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 12, "completion_tokens": 34},
    }


def _rest_client(handler, **overrides) -> tuple[RestClient, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request, len(seen))

    settings = make_settings(OPENAI_API_KEY="sk-test", LLM_TRANSPORT="rest", **overrides)
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
    return RestClient(settings, http_client=http_client), seen


def test_build_model_client_without_key_returns_none():
    assert build_model_client(make_settings()) is None


def test_build_model_client_selects_transport():
    assert isinstance(build_model_client(make_settings(OPENAI_API_KEY="sk-test")), SdkClient)
    client = build_model_client(make_settings(OPENAI_API_KEY="sk-test", LLM_TRANSPORT="rest"))
    assert isinstance(client, RestClient)
    assert client.url == "https://api.openai.com/v1/chat/completions"


@pytest.mark.asyncio
async def test_rest_client_openai_request_and_response():
    client, seen = _rest_client(lambda request, n: httpx.Response(200, json=_openai_body('{"a": 1}')))

    response = await client.complete("Say hi")

    assert response.content == '{"a": 1}'
    assert response.tokens_total == 46
    request = seen[0]
    assert request.headers["Authorization"] == "Bearer sk-test"
    payload = json.loads(request.content)
    assert payload["messages"] == [{"role": "user", "content": "Say hi"}]
    assert payload["model"] == "gpt-4o-mini"


@pytest.mark.asyncio
async def test_rest_client_anthropic_response():
    def handler(request, n):
        return httpx.Response(200, json={
            "content": [{"type": "text", "text": '{"score": 5}'}],
            "usage": {"input_tokens": 7, "output_tokens": 3},
        })

    client, seen = _rest_client(handler, LLM_PROVIDER="anthropic", ANTHROPIC_API_KEY="ak-test")

    response = await client.complete("Grade this")

    assert response.content == '{"score": 5}'
    assert seen[0].url.path == "/v1/messages"
    assert seen[0].headers["x-api-key"] == "ak-test"
    assert "anthropic-version" in seen[0].headers


@pytest.mark.asyncio
async def test_rest_client_retries_server_errors():
    def handler(request, n):
        if n == 1:
            return httpx.Response(503, text="overloaded")
        return httpx.Response(200, json=_openai_body("ok"))

    client, seen = _rest_client(handler)

    response = await client.complete("prompt")

    assert response.content == "ok"
    assert len(seen) == 2


@pytest.mark.asyncio
async def test_rest_client_gives_up_after_bounded_retries():
    def handler(request, n):
        raise httpx.ConnectError("connection refused", request=request)

    client, seen = _rest_client(handler, LLM_MAX_RETRIES=2)

    with pytest.raises(UpstreamCallError):
        await client.complete("prompt")
    assert len(seen) == 3


@pytest.mark.asyncio
async def test_rest_client_does_not_retry_auth_errors():
    client, seen = _rest_client(lambda request, n: httpx.Response(401, json={"error": "bad key"}))

    with pytest.raises(UpstreamCallError) as exc_info:
        await client.complete("prompt")
    assert exc_info.value.retryable is False
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_rest_client_unexpected_shape_is_malformed_and_not_retried():
    client, seen = _rest_client(lambda request, n: httpx.Response(200, json={"unexpected": True}))

    with pytest.raises(MalformedResponse):
        await client.complete("prompt")
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_empty_reply_is_malformed():
    client, _ = _rest_client(lambda request, n: httpx.Response(200, json=_openai_body("   ")))

    with pytest.raises(MalformedResponse):
        await client.complete("prompt")


class StubChatModel:
    """Chat model returning or raising scripted outcomes in order."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def ainvoke(self, messages):
        self.calls.append(messages)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _sdk_client(chat_model, **overrides) -> SdkClient:
    client = SdkClient(make_settings(OPENAI_API_KEY="sk-test", **overrides))
    client._llm = chat_model
    return client


@pytest.mark.asyncio
async def test_sdk_client_returns_chat_model_text():
    client = _sdk_client(FakeListChatModel(responses=['{"questions": []}']))

    response = await client.complete("Generate questions")

    assert response.content == '{"questions": []}'
    assert response.model == "gpt-4o-mini"


@pytest.mark.asyncio
async def test_sdk_client_wraps_and_retries_chat_model_errors():
    chat_model = StubChatModel(
        RuntimeError("rate limited"),
        AIMessage(content="graded"),
    )
    client = _sdk_client(chat_model)

    response = await client.complete("Grade this")

    assert response.content == "graded"
    assert len(chat_model.calls) == 2
    assert chat_model.calls[0][0].content == "Grade this"


@pytest.mark.asyncio
async def test_sdk_client_gives_up_with_upstream_error():
    chat_model = StubChatModel(*[ConnectionError("unreachable")] * 3)
    client = _sdk_client(chat_model, LLM_MAX_RETRIES=2)

    with pytest.raises(UpstreamCallError) as exc_info:
        await client.complete("Grade this")
    assert isinstance(exc_info.value.__cause__, ConnectionError)
    assert len(chat_model.calls) == 3


@pytest.mark.asyncio
async def test_sdk_client_joins_content_blocks_and_reads_usage():
    message = AIMessage(
        content=[
            {"type": "text", "text": "first"},
            {"type": "tool_use", "id": "t1", "name": "noop", "input": {}},
            {"type": "text", "text": "second"},
        ],
        usage_metadata={"input_tokens": 5, "output_tokens": 6, "total_tokens": 11},
    )
    client = _sdk_client(
        StubChatModel(message),
        LLM_PROVIDER="anthropic",
        ANTHROPIC_API_KEY="ak-test",
    )

    response = await client.complete("Grade this")

    assert response.content == "first\nsecond"
    assert response.tokens_prompt == 5
    assert response.tokens_completion == 6
    assert response.model == "claude-3-5-haiku-latest"
