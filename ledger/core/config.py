from functools import lru_cache
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # API Settings
    PROJECT_NAME: str = "Business Ledger API"
    API_V1_STR: str = "/api/v1"
    PROJECT_VERSION: str = "0.1.0"
    DESCRIPTION: str = "Company purchases, payments and running balances"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Storage backend: "local" keeps one JSON document on disk,
    # "mongo" scopes every record to the signed-in user.
    STORAGE_BACKEND: Literal["local", "mongo"] = "local"
    LOCAL_STORE_PATH: str = "data/ledger.json"

    # MongoDB
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB: str = "ledger"
    # Multi-document transactions need a replica set
    MONGODB_USE_TRANSACTIONS: bool = False

    # Default display names for the paid-by selector
    DEFAULT_USER1_NAME: str = "User 1"
    DEFAULT_USER2_NAME: str = "User 2"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # JWT
    SECRET_KEY: str = "change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
