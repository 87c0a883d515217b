"""
Exam Practice Coach - Model Clients
One interface over the generative model with two transports:
LangChain chat models (SDK) and raw HTTP (REST).
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from langchain_core.messages import HumanMessage

from app.core.config import Settings
from app.core.errors import MalformedResponse, UpstreamCallError
from app.ai.core.telemetry import get_tracer, trace_llm_call

logger = logging.getLogger(__name__)

ANTHROPIC_API_VERSION = "2023-06-01"

# 4xx statuses that may succeed on a later attempt
RETRYABLE_CLIENT_STATUSES = {408, 409, 429}


@dataclass
class ModelResponse:
    """Standardized response from a model client."""
    content: str
    model: str
    tokens_prompt: int = 0
    tokens_completion: int = 0
    raw_response: Any = None

    @property
    def tokens_total(self) -> int:
        return self.tokens_prompt + self.tokens_completion


class ModelClient(ABC):
    """
    Generative model access shared by all agents.

    Subclasses implement a single round trip in _invoke(); complete() adds
    tracing and a bounded retry with exponential backoff for
    UpstreamCallError. Malformed replies are never retried.
    """

    transport: str = "base"

    def __init__(self, settings: Settings):
        self.provider = settings.LLM_PROVIDER
        self.model = settings.LLM_MODEL
        self.api_key = settings.LLM_API_KEY
        self.temperature = settings.LLM_TEMPERATURE
        self.max_output_tokens = settings.LLM_MAX_OUTPUT_TOKENS
        self.timeout = settings.LLM_TIMEOUT_SECONDS
        self.max_retries = max(0, settings.LLM_MAX_RETRIES)
        self.retry_backoff = settings.LLM_RETRY_BACKOFF_SECONDS

    @abstractmethod
    async def _invoke(self, prompt: str) -> ModelResponse:
        """Perform one request to the provider."""

    async def complete(self, prompt: str, agent_name: str = "ModelClient") -> ModelResponse:
        """
        Send a single-turn prompt and return the model's text reply.

        Raises:
            UpstreamCallError: When every attempt failed.
            MalformedResponse: When the provider answered with no text.
        """
        tracer = get_tracer()

        with tracer.start_as_current_span("llm.complete") as span:
            span.set_attribute("llm.model", self.model)
            span.set_attribute("llm.provider", self.provider)
            span.set_attribute("llm.transport", self.transport)
            span.set_attribute("agent.name", agent_name)
            span.set_attribute("llm.prompt_length", len(prompt))

            for attempt in range(self.max_retries + 1):
                try:
                    response = await self._invoke(prompt)
                    break
                except UpstreamCallError as e:
                    if not e.retryable or attempt >= self.max_retries:
                        span.record_exception(e)
                        raise
                    delay = self.retry_backoff * (2 ** attempt)
                    logger.warning(
                        "%s call to %s failed (attempt %d of %d), retrying in %.2fs: %s",
                        self.transport, self.provider, attempt + 1, self.max_retries + 1, delay, e,
                    )
                    await asyncio.sleep(delay)

            span.set_attribute("llm.attempts", attempt + 1)

            if not response.content or not response.content.strip():
                raise MalformedResponse("Model response was empty")

            trace_llm_call(
                model=self.model,
                prompt_tokens=response.tokens_prompt,
                completion_tokens=response.tokens_completion,
                total_tokens=response.tokens_total,
            )
            span.set_attribute("llm.response_length", len(response.content))
            return response

    async def aclose(self) -> None:
        """Release network resources held by the client."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} provider={self.provider} model={self.model}>"


class SdkClient(ModelClient):
    """Model access through LangChain chat models."""

    transport = "sdk"

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.base_url = (
            settings.OPENAI_BASE_URL if self.provider == "openai"
            else settings.ANTHROPIC_BASE_URL
        )
        self._llm = None

    @property
    def llm(self):
        """Lazy-load the chat model. Retries are handled by complete()."""
        if self._llm is None:
            if self.provider == "openai":
                from langchain_openai import ChatOpenAI
                self._llm = ChatOpenAI(
                    model=self.model,
                    api_key=self.api_key,
                    base_url=self.base_url,
                    temperature=self.temperature,
                    max_tokens=self.max_output_tokens,
                    timeout=self.timeout,
                    max_retries=0,
                )
            else:
                from langchain_anthropic import ChatAnthropic
                self._llm = ChatAnthropic(
                    model=self.model,
                    api_key=self.api_key,
                    base_url=self.base_url,
                    temperature=self.temperature,
                    max_tokens=self.max_output_tokens,
                    timeout=self.timeout,
                    max_retries=0,
                )
        return self._llm

    @staticmethod
    def _text_of(content: Any) -> str:
        # Anthropic replies may arrive as a list of content blocks
        if isinstance(content, str):
            return content
        parts = []
        for block in content or []:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "\n".join(parts)

    async def _invoke(self, prompt: str) -> ModelResponse:
        try:
            response = await self.llm.ainvoke([HumanMessage(content=prompt)])
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise UpstreamCallError(f"{self.provider} SDK call failed: {e}") from e

        tokens_prompt = 0
        tokens_completion = 0
        usage = getattr(response, "usage_metadata", None)
        if usage:
            tokens_prompt = usage.get("input_tokens", 0)
            tokens_completion = usage.get("output_tokens", 0)
        elif hasattr(response, "response_metadata"):
            token_usage = response.response_metadata.get("token_usage", {})
            tokens_prompt = token_usage.get("prompt_tokens", 0)
            tokens_completion = token_usage.get("completion_tokens", 0)

        return ModelResponse(
            content=self._text_of(response.content),
            model=self.model,
            tokens_prompt=tokens_prompt,
            tokens_completion=tokens_completion,
            raw_response=response,
        )


class RestClient(ModelClient):
    """Model access over plain HTTP with httpx."""

    transport = "rest"

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__(settings)
        if self.provider == "openai":
            self.url = f"{settings.OPENAI_BASE_URL.rstrip('/')}/chat/completions"
        else:
            self.url = f"{settings.ANTHROPIC_BASE_URL.rstrip('/')}/v1/messages"
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=self.timeout)

    def _request(self, prompt: str) -> tuple[dict, dict]:
        messages = [{"role": "user", "content": prompt}]
        if self.provider == "openai":
            headers = {"Authorization": f"Bearer {self.api_key}"}
        else:
            headers = {
                "x-api-key": self.api_key,
                "anthropic-version": ANTHROPIC_API_VERSION,
            }
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_output_tokens,
        }
        return headers, payload

    def _parse(self, data: dict) -> ModelResponse:
        try:
            if self.provider == "openai":
                content = data["choices"][0]["message"]["content"] or ""
                usage = data.get("usage") or {}
                tokens_prompt = usage.get("prompt_tokens", 0)
                tokens_completion = usage.get("completion_tokens", 0)
            else:
                content = "\n".join(
                    block.get("text", "")
                    for block in data["content"]
                    if block.get("type") == "text"
                )
                usage = data.get("usage") or {}
                tokens_prompt = usage.get("input_tokens", 0)
                tokens_completion = usage.get("output_tokens", 0)
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise MalformedResponse(f"Unexpected {self.provider} response shape") from e

        return ModelResponse(
            content=content,
            model=self.model,
            tokens_prompt=tokens_prompt,
            tokens_completion=tokens_completion,
            raw_response=data,
        )

    async def _invoke(self, prompt: str) -> ModelResponse:
        headers, payload = self._request(prompt)
        try:
            response = await self._http.post(self.url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise UpstreamCallError(f"{self.provider} REST call failed: {e!r}") from e

        if response.status_code >= 400:
            retryable = response.status_code >= 500 or response.status_code in RETRYABLE_CLIENT_STATUSES
            raise UpstreamCallError(
                f"{self.provider} REST call failed: HTTP {response.status_code} {response.text[:500]}",
                retryable=retryable,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponse(f"{self.provider} returned a non-JSON body") from e
        return self._parse(data)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()


def build_model_client(settings: Settings) -> Optional[ModelClient]:
    """
    Create the model client for the configured provider and transport.

    Returns None when no API key is configured for the provider; callers
    then use the local question drafter and heuristic scorer.
    """
    if not settings.LLM_API_KEY:
        logger.info("No API key configured for %s; model client disabled", settings.LLM_PROVIDER)
        return None

    if settings.LLM_TRANSPORT == "rest":
        client = RestClient(settings)
    else:
        client = SdkClient(settings)
    logger.info("Using %r", client)
    return client
