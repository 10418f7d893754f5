"""
LLM Client Infrastructure
=========================

Chat completion client used to narrate administrator reports.

Reports depend on ``ILLMClient`` only; the OpenAI SDK stays behind this
module, and a deterministic mock stands in when ``MOCK_LLM`` is set.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from openai import AsyncOpenAI, OpenAIError

from hostelfix.config import settings
from hostelfix.core import LLMException, ConfigurationException
from hostelfix.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

Messages = List[dict]


@dataclass(frozen=True)
class ChatCompletionResult:
    """Text returned by one chat completion, with its usage."""
    content: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    latency_ms: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class ILLMClient(ABC):
    """Interface for chat completions."""

    @abstractmethod
    async def chat_completion(
        self,
        messages: Messages,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        operation: str = "chat_completion"
    ) -> ChatCompletionResult:
        """
        Complete a conversation.

        Raises:
            LLMException: Provider call failed
        """


class OpenAILLMClient(ILLMClient):
    """Chat completions through the OpenAI API."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        api_key = api_key or settings.openai_api_key
        if not api_key:
            raise ConfigurationException("OPENAI_API_KEY is required for narration")

        self._client = AsyncOpenAI(api_key=api_key)
        self._model = model or settings.llm_model

    async def chat_completion(
        self,
        messages: Messages,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        operation: str = "chat_completion"
    ) -> ChatCompletionResult:
        started = time.perf_counter()
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=settings.llm_temperature if temperature is None else temperature,
                max_tokens=max_tokens or settings.llm_max_tokens
            )
        except OpenAIError as e:
            raise LLMException(f"{operation} failed: {e}", {"operation": operation, "model": self._model})

        usage = response.usage
        result = ChatCompletionResult(
            content=response.choices[0].message.content or "",
            model=self._model,
            prompt_tokens=getattr(usage, "prompt_tokens", 0),
            completion_tokens=getattr(usage, "completion_tokens", 0),
            latency_ms=int((time.perf_counter() - started) * 1000),
        )

        logger.info(
            "Narration generated",
            extra={
                "operation": operation,
                "model": self._model,
                "tokens_used": result.total_tokens,
                "latency_ms": result.latency_ms
            }
        )
        return result


class MockLLMClient(ILLMClient):
    """Deterministic client for local runs and tests; no network access."""

    SUMMARY_TEXT = (
        "Most issues this week are concentrated in hostel infrastructure, "
        "particularly water and electricity. High urgency issues should be "
        "prioritized. Focus staff on recurring maintenance issues to reduce "
        "SLA delays."
    )

    async def chat_completion(
        self,
        messages: Messages,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        operation: str = "chat_completion"
    ) -> ChatCompletionResult:
        content = self.SUMMARY_TEXT if "summary" in operation else f"Mock reply for {operation}."
        return ChatCompletionResult(content=content, model="mock-model", completion_tokens=len(content.split()))


def get_llm_client() -> Optional[ILLMClient]:
    """
    Build the configured LLM client.

    Returns None when no provider is configured; reports then use the
    placeholder narration.
    """
    if settings.mock_llm:
        return MockLLMClient()
    if settings.openai_api_key:
        return OpenAILLMClient()
    return None
