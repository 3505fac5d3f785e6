from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys
    anthropic_api_key: str = ""

    # Speech recognition
    asr_model_id: str = "openai/whisper-tiny.en"
    asr_device: str = "cpu"
    chunk_timeout_s: float | None = None  # None: a hung chunk blocks the pipeline
    ffmpeg_binary: str = "ffmpeg"

    # Topic analysis
    llm_model: str = "claude-sonnet-4-20250514"
    topic_service_url: str = "http://localhost:8000"
    topic_service_timeout: float = 120.0

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
