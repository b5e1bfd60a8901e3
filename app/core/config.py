from pydantic_settings import BaseSettings
from pydantic import AliasChoices, ConfigDict, Field
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Pydantic v2 config
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow"  # Allow extra fields from environment
    )

    # Application
    app_name: str = "EduSmart Assistant"
    app_version: str = "1.0.0"
    environment: str = "development"  # development, staging, production
    debug: bool = True

    # API
    api_prefix: str = "/api"

    # Logging
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: str = "/tmp/edusmart.log"  # Vercel uses /tmp for writable files

    # LLM Configuration
    llm_provider: str = "google"  # google, openai
    llm_model: str = "gemini-1.5-pro-latest"
    llm_temperature: float = 0.7
    llm_top_p: float = 0.8
    max_tokens: int = 2048
    llm_timeout_seconds: float = 60.0

    # API Keys (first match wins)
    google_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "GOOGLE_API_KEY",
            "GEMINI_API_KEY",
            "GEMINI_PRO_API_KEY",
            "GOOGLE_AI_STUDIO_KEY",
        ),
    )
    openai_api_key: Optional[str] = None

    # CORS
    allowed_origins: list = ["*"]

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def provider(self) -> str:
        return self.llm_provider.lower().strip()

    @property
    def llm_api_key(self) -> Optional[str]:
        """Credential for the selected provider, or None when it is not set."""
        keys = {
            "google": self.google_api_key,
            "openai": self.openai_api_key,
        }
        key = keys.get(self.provider)
        if key and key.strip():
            return key.strip()
        return None

    @property
    def has_llm_credentials(self) -> bool:
        return self.llm_api_key is not None


# Create single instance to be imported throughout the app
settings = Settings()
