"""
Tier 1 - language model analysis through OpenAI.
"""

from typing import Optional, Sequence

from logscope.classifier.tiers.base import AnalysisTier, TierUnavailableError
from logscope.config import Settings, get_settings
from logscope.llm.client import OpenAIClient
from logscope.llm.prompts import PromptTemplates
from logscope.llm.response import parse_llm_response
from logscope.models.analysis import AnalysisResult
from logscope.models.log_entry import ParsedLogEntry


class LLMTier(AnalysisTier):
    """
    Asks a chat model to classify the entry, quoting the most recent
    entries of the batch as situational context.
    """

    name = "openai"
    description = "OpenAI chat completion with recent-event context"

    def __init__(self, settings: Optional[Settings] = None, client: Optional[OpenAIClient] = None):
        self.settings = settings or get_settings()
        self._client = client

    def is_available(self) -> bool:
        return self._client is not None or bool(self.settings.openai_api_key)

    @property
    def client(self) -> OpenAIClient:
        # Built lazily: AsyncOpenAI refuses to construct without an API key
        if self._client is None:
            if not self.settings.openai_api_key:
                raise TierUnavailableError("OpenAI API key is not configured")
            self._client = OpenAIClient(self.settings)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def analyze(
        self,
        entry: ParsedLogEntry,
        context: Sequence[ParsedLogEntry] = (),
    ) -> AnalysisResult:
        prompt = PromptTemplates.format_entry_prompt(
            entry, context, window=self.settings.context_window
        )
        content = await self.client.complete(
            system_prompt=PromptTemplates.SYSTEM,
            user_prompt=prompt,
        )
        if not content or not content.strip():
            raise TierUnavailableError("OpenAI returned an empty completion")

        return parse_llm_response(content, analyzed_by=self.name)
