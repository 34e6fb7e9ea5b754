"""
Application configuration using Pydantic Settings.
Loads from environment variables and .env file.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # OpenAI Configuration (tier 1)
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.1
    openai_max_tokens: int = 300
    openai_timeout: float = 30.0

    # Hugging Face Configuration (tier 2)
    huggingface_api_key: str = ""
    huggingface_model: str = "facebook/bart-large-mnli"
    huggingface_api_url: str = "https://router.huggingface.co/hf-inference/models"
    huggingface_timeout: float = 30.0
    zero_shot_labels: List[str] = ["normal", "suspicious", "malicious", "error"]

    # Rule engine policy (tier 3)
    denylisted_ips: List[str] = []
    repeated_ip_threshold: int = 5

    # Number of prior entries quoted in the LLM prompt
    context_window: int = 5

    # Application Settings
    debug: bool = True
    app_name: str = "LogScope"
    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
