"""
OpenAI API client wrapper.
"""

import logging
from typing import Optional

import httpx
from openai import AsyncOpenAI

from logscope.config import Settings, get_settings


logger = logging.getLogger(__name__)


class OpenAIClient:
    """
    Async client for OpenAI chat completions.

    Features:
    - JSON mode for structured responses
    - Configurable model, temperature, tokens and timeout
    - Returns the raw completion text; parsing is the caller's job
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.client = AsyncOpenAI(
            api_key=self.settings.openai_api_key,
            timeout=httpx.Timeout(self.settings.openai_timeout, connect=10.0),
        )

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Send a chat completion request.

        Args:
            system_prompt: System instructions pinning the response shape
            user_prompt: User message describing the log entry
            temperature: Override default temperature
            max_tokens: Override default max tokens

        Returns:
            Completion text (may be empty)

        Raises:
            openai.OpenAIError: For API, auth and network errors
        """
        temp = temperature if temperature is not None else self.settings.openai_temperature
        tokens = max_tokens if max_tokens is not None else self.settings.openai_max_tokens

        try:
            response = await self.client.chat.completions.create(
                model=self.settings.openai_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temp,
                max_tokens=tokens,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            # Log and re-raise for caller to handle
            logger.error(f"OpenAI API error: {e}")
            raise

        return response.choices[0].message.content or ""

    async def aclose(self) -> None:
        await self.client.close()
