"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "FitQuest Coach Backend"
    debug: bool = False
    log_level: str = "INFO"
    generation_endpoint_url: str = "https://toolkit.rork.com/text/llm/"
    generation_backoff_ms: int = 400
    workout_timeout_ms: int = 35000
    workout_max_retries: int = 1
    targets_timeout_ms: int = 22000
    targets_max_retries: int = 1
    macro_timeout_ms: int = 16000
    macro_max_retries: int = 0
    advice_timeout_ms: int = 28000
    advice_max_retries: int = 1
    chat_timeout_ms: int = 30000
    chat_max_retries: int = 1
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "fitquest-coach"
    rewards_enabled: bool = True
    reward_ledger_provider: str = "noop"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
