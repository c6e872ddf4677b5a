"""Environment-based configuration for the document analyzer."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Document analyzer settings, loaded from environment variables."""

    # Server
    PORT: int = 8092

    # Gemini credential (empty = extraction disabled, local dev default)
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-3-flash-preview"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com"

    # Single call per extraction, no retry
    GEMINI_TIMEOUT_SECONDS: int = 120
    GEMINI_CONNECT_TIMEOUT: int = 10

    model_config = {"env_prefix": "", "case_sensitive": True}


settings = Settings()
