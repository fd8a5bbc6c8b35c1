from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return float(value)


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here. Components receive an
    instance explicitly instead of reading the environment themselves.
    """

    def __init__(self) -> None:
        self.app_env: str = os.getenv("APP_ENV", "development")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.port: int = int(os.getenv("PORT", "3000"))
        self.public_dir: str = os.getenv(
            "PUBLIC_DIR",
            os.path.join(os.path.dirname(os.path.dirname(__file__)), "public"),
        )

        self.fireworks_api_key: Optional[str] = os.getenv("FIREWORKS_API_KEY") or None
        self.fireworks_api_url: str = os.getenv(
            "FIREWORKS_API_URL", "https://api.fireworks.ai/inference/v1/chat/completions"
        )
        self.primary_model: str = os.getenv(
            "FIREWORKS_MODEL",
            "accounts/sentientfoundation/models/dobby-unhinged-llama-3-3-70b-new",
        )
        self.repair_model: str = os.getenv(
            "FIREWORKS_REPAIR_MODEL",
            "accounts/sentientfoundation-serverless/models/dobby-mini-unhinged-plus-llama-3-1-8b",
        )
        self.max_tokens: int = int(os.getenv("MODEL_MAX_TOKENS", "4096"))
        self.temperature: float = float(os.getenv("MODEL_TEMPERATURE", "0.6"))
        self.top_p: float = float(os.getenv("MODEL_TOP_P", "1"))
        self.top_k: int = int(os.getenv("MODEL_TOP_K", "40"))
        self.repair_max_tokens: int = 256
        # None disables the timeout entirely
        self.request_timeout: Optional[float] = _optional_float("INFERENCE_TIMEOUT")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
