from __future__ import annotations

import json
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+pysqlite:///./creditos.db"
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 40
    DB_POOL_TIMEOUT: int = 30
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    API_V1_PREFIX: str = "/api/v1"
    APP_NAME: str = "Consulta de Creditos"
    ENVIRONMENT: str = "production"
    TRUST_PROXY: bool = False
    CORS_ORIGINS: list[str] = ["http://localhost:4200"]
    RATE_LIMIT_ENABLED: bool = True
    REDIS_URL: str = ""
    AUDIT_STREAM_KEY: str = "creditos:audit-events"
    AUDIT_STREAM_MAXLEN: int = 100000
    AUDIT_QUEUE_MAXSIZE: int = 1000
    TEST_FEATURES_ENABLED: bool = False

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_csv_or_json_list(cls, value: object) -> list[str]:
        if value is None:
            return []

        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                return []

            if raw.startswith("["):
                try:
                    parsed = json.loads(raw)
                    if isinstance(parsed, list):
                        return [str(item).strip() for item in parsed if str(item).strip()]
                except json.JSONDecodeError:
                    pass

            return [item.strip() for item in raw.split(",") if item.strip()]

        if isinstance(value, (list, tuple, set)):
            return [str(item).strip() for item in value if str(item).strip()]

        return [str(value).strip()] if str(value).strip() else []

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"json", "console"}:
            raise ValueError("LOG_FORMAT deve ser 'json' ou 'console'")
        return normalized

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
