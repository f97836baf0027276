from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load env values for SDKs that read os.environ directly (e.g., the OpenAI client).
_project_root = Path(__file__).resolve().parents[1]
load_dotenv(_project_root / ".env", override=False)

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
ALLOWED_MODELS = (
    "gpt-4o-mini",
    "gpt-4o",
    "gpt-4.1",
    "gpt-4.1-mini",
    "gpt-4.1-nano",
    "gpt-4-turbo",
    "gpt-4",
    "gpt-3.5-turbo",
)


class ConfigurationError(Exception):
    """A required secret or endpoint is not configured."""

    def __init__(self, variable: str) -> None:
        super().__init__(f"{variable} not configured")
        self.variable = variable


class Settings(BaseSettings):
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str | None = None
    OPENAI_MODEL: str | None = None
    OPENAI_TEMPERATURE: float | None = None
    OPENAI_MAX_TOKENS: int | None = None
    OPENAI_REQUEST_TIMEOUT_SECONDS: float = 120.0

    SUPABASE_URL: str | None = None
    SUPABASE_ANON_KEY: str | None = None
    SUPABASE_REQUEST_TIMEOUT_SECONDS: float = 20.0

    WEBSITE_FETCH_TIMEOUT_SECONDS: float = 12.0
    WEBSITE_FETCH_MAX_PAGES: int = 5
    WEBSITE_TEXT_MAX_CHARS: int = 15000
    WEBSITE_USER_AGENT: str = "DropshipAI/1.0 (+analysis)"

    DEFAULT_SEGMENT_LOCALE: str = "Australia"
    SEGMENT_LABEL_POLICY: Literal["admit", "reject"] = "admit"

    BACKEND_CORS_ORIGINS: str = "http://localhost:3000"

    @field_validator("OPENAI_API_KEY", "SUPABASE_URL", "SUPABASE_ANON_KEY", "OPENAI_MODEL", mode="before")
    @classmethod
    def blank_as_missing(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def require_openai_api_key(self) -> str:
        if not self.OPENAI_API_KEY:
            raise ConfigurationError("OPENAI_API_KEY")
        return self.OPENAI_API_KEY

    def require_supabase(self) -> tuple[str, str]:
        if not self.SUPABASE_URL:
            raise ConfigurationError("SUPABASE_URL")
        if not self.SUPABASE_ANON_KEY:
            raise ConfigurationError("SUPABASE_ANON_KEY")
        return self.SUPABASE_URL.rstrip("/"), self.SUPABASE_ANON_KEY

    @property
    def cors_origins(self) -> list[str]:
        return sorted({origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()})

    @property
    def resolved_model(self) -> str:
        return resolve_model(self.OPENAI_MODEL)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def resolve_model(requested: str | None) -> str:
    """Return an allow-listed model name, falling back to the default with a warning."""

    if not requested:
        return DEFAULT_MODEL
    candidate = requested.strip()
    if candidate in ALLOWED_MODELS:
        return candidate
    logger.warning(
        "Unsupported OpenAI model requested; falling back to default",
        extra={"requested_model": candidate, "fallback_model": DEFAULT_MODEL},
    )
    return DEFAULT_MODEL


settings = Settings()
