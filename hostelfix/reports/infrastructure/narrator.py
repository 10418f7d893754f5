"""
LLM Narrator
============

Adapter from the reports narrator interface to the shared LLM client.
"""

from hostelfix.core import LLMException, SummaryNarrationException
from hostelfix.infrastructure.llm import ILLMClient
from hostelfix.reports.application.services import INarrator
from hostelfix.reports.domain import IssueStatistics, SummaryPromptBuilder


class LLMNarrator(INarrator):
    """Narrates weekly statistics with a chat completion."""

    def __init__(self, llm_client: ILLMClient):
        self._llm = llm_client

    async def narrate(self, statistics: IssueStatistics) -> str:
        messages = [
            {"role": "system", "content": SummaryPromptBuilder.get_system_prompt()},
            {"role": "user", "content": SummaryPromptBuilder.build_prompt(statistics)}
        ]

        try:
            response = await self._llm.chat_completion(messages=messages, operation="weekly_summary")
        except LLMException as e:
            raise SummaryNarrationException(e.message, e.details)

        narration = (response.content or "").strip()
        if not narration:
            raise SummaryNarrationException("Empty narration returned")
        return narration
