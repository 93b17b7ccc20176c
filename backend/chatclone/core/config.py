"""
Environment-driven settings for the server and the chat client.

Server-side providers are switched by LLM_PROVIDER / SPEECH_PROVIDER / AUTH_PROVIDER.
The CLIENT section configures the conversation core that talks to the API.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "production"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./chatclone.db"

    # ===========================================
    # LLM Configuration
    # ===========================================
    # LLM Provider: "litellm" | "gemini-api"
    # - litellm: LiteLLM (Groq, OpenAI, Bedrock, etc. with optional custom endpoint)
    # - gemini-api: Gemini API (API Key)
    LLM_PROVIDER: Literal["litellm", "gemini-api"] = "litellm"

    # LiteLLM model identifier (for litellm provider)
    LITELLM_MODEL: str = "groq/llama-3.3-70b-versatile"

    # LiteLLM custom endpoint (optional, for proxy servers)
    LITELLM_API_BASE: str = ""

    # LiteLLM custom API key (optional, for custom endpoints)
    LITELLM_API_KEY: str = ""

    # Vision model used to describe uploaded images.
    # Falls back to LITELLM_MODEL when empty.
    LITELLM_VISION_MODEL: str = "groq/meta-llama/llama-4-scout-17b-16e-instruct"

    # Gemini model name (for gemini-api)
    GEMINI_MODEL: str = "gemini-2.0-flash"

    # Google API Key (for gemini-api provider)
    GOOGLE_API_KEY: str = ""

    # ===========================================
    # Generation
    # ===========================================
    CHAT_TEMPERATURE: float = 0.7
    REGENERATE_TEMPERATURE: float = 0.9
    TITLE_TEMPERATURE: float = 0.7
    MAX_COMPLETION_TOKENS: int = 1000
    VISION_MAX_TOKENS: int = 500

    # ===========================================
    # Context Window
    # ===========================================
    MAX_CONTEXT_TOKENS: int = 6000
    # Headroom left for the next completion
    RESERVE_TOKENS: int = 1000
    CHARS_PER_TOKEN: int = 4

    # ===========================================
    # Speech-to-Text
    # ===========================================
    # "litellm": hosted Whisper through LiteLLM, "whisper": local openai-whisper
    SPEECH_PROVIDER: Literal["litellm", "whisper"] = "litellm"
    LITELLM_TRANSCRIPTION_MODEL: str = "groq/whisper-large-v3"
    WHISPER_MODEL_SIZE: str = "base"  # tiny, base, small, medium, large
    SPEECH_LANGUAGE: str = "en-US"

    # ===========================================
    # Auth (OIDC/JWT)
    # ===========================================
    AUTH_PROVIDER: Literal["mock", "oidc"] = "mock"
    AUTH_REQUIRED: bool = False
    OIDC_ISSUER: str = ""
    OIDC_AUDIENCE: str = ""
    OIDC_JWKS_URL: str = ""
    OIDC_EMAIL_CLAIM: str = "email"
    OIDC_NAME_CLAIM: str = "name"

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    # URL for accessing the backend (for storage URLs)
    BASE_URL: str = "http://localhost:8000"

    # ===========================================
    # Storage / Files
    # ===========================================
    STORAGE_BASE_PATH: str = "./storage"
    FILE_TEXT_MAX_CHARS: int = 3000
    MAX_UPLOAD_BYTES: int = 20 * 1024 * 1024

    # ===========================================
    # Memory
    # ===========================================
    MEMORY_SEARCH_LIMIT: int = 5
    MEMORY_RETRY_ATTEMPTS: int = 3
    MEMORY_RETRY_DELAY_SECONDS: float = 0.3

    # ===========================================
    # Client (conversation core)
    # ===========================================
    API_BASE_URL: str = "http://localhost:8000"
    LOCAL_STORE_PATH: str = "./local_chats.json"
    CLIENT_TIMEOUT_SECONDS: float = 60.0


@lru_cache()
def get_settings() -> Settings:
    """Settings read once per process; tests call get_settings.cache_clear()."""
    return Settings()
