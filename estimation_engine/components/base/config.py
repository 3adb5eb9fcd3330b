from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Centralized configuration for the estimation engine."""

    # Application
    app_name: str = "Project Estimation Engine"
    app_version: str = "1.0.0"
    environment: str = "development"

    # Ollama (default text scoring backend)
    ollama_base_url: str = "http://localhost:11434"
    ollama_gen_model: str = "phi3:mini"
    ollama_timeout_seconds: int = 120

    # Complexity scoring calls
    scoring_temperature: float = 0.1
    scoring_max_tokens: int = 200

    # Default rate configuration
    default_hourly_rate: float = 100.0
    default_currency: str = "USD"
    default_overhead: float = 0.3
    default_profit_margin: float = 0.2

    # Default complexity factor weights
    factor_technical: float = 1.0
    factor_business: float = 0.8
    factor_integration: float = 1.2
    factor_testing: float = 0.6
    factor_documentation: float = 0.4

    # Historical ledger
    historical_ledger_capacity: int = 100

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
