"""Application settings.

All configuration is sourced from environment variables (and optionally `.env`).
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


class IntakeMode(str, Enum):
    """How a selected image becomes an image reference."""

    STORAGE = "storage"  # upload to Cloudinary, analyse the hosted URL
    INLINE = "inline"  # encode to a data URI, never leaves memory


class Settings(BaseSettings):
    """Typed environment-backed settings for the critic server and client."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Generative-AI collaborator (OpenAI)
    openai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "CRITIC_OPENAI_API_KEY"),
    )
    openai_base_url: Optional[str] = Field(default=None, alias="OPENAI_BASE_URL")
    vision_model: str = Field(default="gpt-4o-mini", alias="CRITIC_VISION_MODEL")
    image_model: str = Field(default="gpt-image-1", alias="CRITIC_IMAGE_MODEL")
    image_size: str = Field(default="1024x1024", alias="CRITIC_IMAGE_SIZE")
    image_detail: str = Field(default="low", alias="CRITIC_IMAGE_DETAIL")
    journey_max_tokens: int = Field(default=400, alias="CRITIC_JOURNEY_MAX_TOKENS")
    abtest_max_tokens: int = Field(default=300, alias="CRITIC_ABTEST_MAX_TOKENS")
    llm_timeout: float = Field(default=120.0, alias="CRITIC_LLM_TIMEOUT")

    # Image resolution
    fetch_timeout: float = Field(default=30.0, alias="CRITIC_FETCH_TIMEOUT")
    default_mime_type: str = Field(default="image/jpeg", alias="CRITIC_DEFAULT_MIME")

    # Intake / storage collaborator (Cloudinary)
    intake_mode: IntakeMode = Field(default=IntakeMode.STORAGE, alias="CRITIC_INTAKE_MODE")
    cloudinary_cloud_name: Optional[str] = Field(default=None, alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: Optional[str] = Field(default=None, alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: Optional[str] = Field(default=None, alias="CLOUDINARY_API_SECRET")
    cloudinary_folder: str = Field(default="ai-ui-critic-uploads", alias="CLOUDINARY_FOLDER")
    storage_timeout: float = Field(default=60.0, alias="CRITIC_STORAGE_TIMEOUT")
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, alias="CRITIC_MAX_UPLOAD_BYTES")

    # HTTP server
    cors_origins_raw: str = Field(default="", alias="CRITIC_CORS_ORIGINS")
    port: int = Field(default=5001, alias="PORT")

    # Client
    api_url: str = Field(default="http://localhost:5001", alias="CRITIC_API_URL")
    client_timeout: float = Field(default=120.0, alias="CRITIC_CLIENT_TIMEOUT")
    contrast_delay: float = Field(default=1.5, alias="CRITIC_CONTRAST_DELAY")

    @property
    def llm_configured(self) -> bool:
        return bool(self.openai_api_key and self.openai_api_key.strip())

    @property
    def storage_configured(self) -> bool:
        return all(
            value and value.strip()
            for value in (
                self.cloudinary_cloud_name,
                self.cloudinary_api_key,
                self.cloudinary_api_secret,
            )
        )

    def cors_origins(self) -> List[str]:
        raw = self.cors_origins_raw.strip()
        if raw:
            return [origin.strip() for origin in raw.split(",") if origin.strip()]
        return list(DEFAULT_CORS_ORIGINS)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
