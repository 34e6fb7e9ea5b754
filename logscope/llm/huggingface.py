"""
Hugging Face inference API client for zero-shot classification.
"""

import logging
from typing import List, Optional, Tuple

import httpx

from logscope.config import Settings, get_settings


logger = logging.getLogger(__name__)


class ZeroShotResponseError(ValueError):
    """Raised when the inference API returns something we can't read."""
    pass


class HuggingFaceClient:
    """
    Async client for the Hugging Face zero-shot classification endpoint.

    Usage:
        client = HuggingFaceClient(settings)
        labels = await client.classify("Failed password for root", ["normal", "malicious"])
        top_label, top_score = labels[0]
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self.url = f"{self.settings.huggingface_api_url.rstrip('/')}/{self.settings.huggingface_model}"
        self.http_client = http_client or httpx.AsyncClient(
            timeout=self.settings.huggingface_timeout
        )

    async def classify(self, text: str, candidate_labels: List[str]) -> List[Tuple[str, float]]:
        """
        Classify text against a fixed set of candidate labels.

        Args:
            text: Text to classify
            candidate_labels: Labels to score

        Returns:
            (label, score) pairs, highest score first

        Raises:
            httpx.HTTPError: On network errors or non-2xx responses
            ZeroShotResponseError: If the response body has an unexpected shape
        """
        response = await self.http_client.post(
            self.url,
            json={
                "inputs": text,
                "parameters": {"candidate_labels": candidate_labels},
            },
            headers={"Authorization": f"Bearer {self.settings.huggingface_api_key}"},
        )
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as e:
            raise ZeroShotResponseError(f"Response is not JSON: {e}") from e

        return self._read_scores(data)

    def _read_scores(self, data) -> List[Tuple[str, float]]:
        """
        Accept both response shapes served by the inference API:
        {"labels": [...], "scores": [...]} and [{"label": ..., "score": ...}, ...]
        """
        pairs: List[Tuple[str, float]] = []

        try:
            if isinstance(data, dict) and "labels" in data and "scores" in data:
                pairs = [(str(l), float(s)) for l, s in zip(data["labels"], data["scores"])]
            elif isinstance(data, list):
                pairs = [(str(item["label"]), float(item["score"])) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise ZeroShotResponseError(f"Malformed zero-shot response: {e}") from e

        if not pairs:
            raise ZeroShotResponseError(f"Unexpected zero-shot response: {str(data)[:200]}")

        pairs.sort(key=lambda pair: pair[1], reverse=True)
        return pairs

    async def aclose(self) -> None:
        await self.http_client.aclose()
