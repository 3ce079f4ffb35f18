"""Configuration management for CEP Finder."""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Every setting has a default suitable for local development.
    """

    # Application
    APP_NAME: str = "CEP Finder"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # API
    API_PREFIX: str = ""
    LOOKUP_PATH: str = "/consulta"

    # Dispatch
    DISPATCH_TIMEOUT_SECONDS: float = 1.0  # Shared deadline for all upstream sources

    # Upstream sources ({cep} is replaced by the queried code)
    BRASILAPI_URL: str = "https://brasilapi.com.br/api/cep/v1/{cep}"
    VIACEP_URL: str = "http://viacep.com.br/ws/{cep}/json/"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"

    # Query CLI
    SERVER_URL: str = "http://localhost:8080"
    CLIENT_TIMEOUT_SECONDS: float = 5.0

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Singleton settings instance
    """
    return Settings()
