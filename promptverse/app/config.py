from __future__ import annotations

from typing import Literal, Optional

from pydantic import AnyUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    APP_ENV: str = "local"

    # Local durable store
    STORE_DIR: str = "data/store"
    STORAGE_KEY: str = "promptverse_data_v1"
    LOCKOUT_KEY: str = "promptverse_lockout_v1"
    STORE_MAX_BYTES: Optional[int] = None

    # Admin identity
    AUTH_STRATEGY: Literal["local", "delegated"] = "local"
    ADMIN_EMAILS: list[str] = Field(default_factory=list)
    SUPABASE_URL: Optional[AnyUrl] = None
    SUPABASE_SERVICE_ROLE_KEY: str = ""

    # Content enhancement
    GEMINI_API_KEY: Optional[SecretStr] = None
    GEMINI_MODEL: str = "gemini-2.5-flash"

    MEDIA_BASE_URL: str = "https://res.cloudinary.com/promptverse/image/upload"

    # Timers
    MESSAGE_RETENTION_HOURS: int = 24
    MESSAGE_SWEEP_INTERVAL_SECONDS: float = 3600.0
    LOCKOUT_TICK_SECONDS: float = 1.0

    # Admin sessions
    SESSION_TTL_SECONDS: float = Field(default=8 * 60 * 60, gt=0)
    MAX_ADMIN_SESSIONS: int = Field(default=20, ge=1)

    FRONTEND_CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"],
    )


settings = Settings()
