"""
Remote model integration: OpenAI chat completions and Hugging Face zero-shot.
"""

from logscope.llm.client import OpenAIClient
from logscope.llm.huggingface import HuggingFaceClient, ZeroShotResponseError
from logscope.llm.prompts import PromptTemplates
from logscope.llm.response import parse_llm_response

__all__ = [
    "OpenAIClient",
    "HuggingFaceClient",
    "ZeroShotResponseError",
    "PromptTemplates",
    "parse_llm_response",
]
