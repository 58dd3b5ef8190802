from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "ItemSurge"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite:///./itemsurge.db"

    openai_api_key: Optional[str] = None
    openai_api_base: Optional[str] = None
    openai_model: str = "o4-mini"
    openai_reasoning_effort: Optional[str] = "medium"
    openai_timeout_seconds: float = 120.0

    greedy_matching: bool = False
    min_algo_search_length: int = 4
    greedy_min_prefix_length: int = 4
    fuzzy_max_distance: int = 2

    confidence_confirmed: float = 1.0
    confidence_llm_only: float = 0.8
    confidence_algo_validated: float = 0.7
    default_llm_confidence: float = 0.9

    voting_runs: int = 3
    voting_threshold: float = 0.6
    voting_max_concurrency: int = 5

    oracle_max_retries: int = 3
    oracle_retry_base_delay: float = 1.0
    oracle_retry_max_delay: float = 30.0

    margin_threshold: int = 1_000_000
    price_variance_percent: float = 0.05
    min_mention_confidence: float = 0.5

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False


settings = Settings()
