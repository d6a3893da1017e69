from functools import lru_cache
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="allow",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # --- Server ---
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=3000, validation_alias="PORT")
    public_url: Optional[str] = Field(default=None, validation_alias="PUBLIC_URL")
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")

    # --- Catalog ---
    # Unset means the bundled gateway/data/agents.json
    catalog_path: Optional[str] = Field(default=None, validation_alias="CATALOG_PATH")

    # --- CORS ---
    cors_allowed_origins: str = Field(default="*", validation_alias="CORS_ALLOWED_ORIGINS")

    # --- Logging ---
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, validation_alias="LOG_FILE")

    @model_validator(mode="after")
    def _normalize_public_url(self) -> "Settings":
        url = self.public_url or f"http://{self.host}:{self.port}"
        self.public_url = url.rstrip("/")
        return self

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
