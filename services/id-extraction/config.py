"""Environment-based configuration for the ID extraction service."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """ID extraction settings, loaded from environment variables."""

    # Server
    PORT: int = 8092

    # Inference API (empty key = extraction unavailable, local dev default)
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4o"
    OPENAI_MAX_TOKENS: int = 1500
    OPENAI_TEMPERATURE: float = 0.1

    # Inference timeouts and retry (retry covers connection failures only)
    INFERENCE_TIMEOUT_SECONDS: int = 120
    INFERENCE_CONNECT_TIMEOUT: int = 10
    INFERENCE_RETRY_ATTEMPTS: int = 1
    INFERENCE_RETRY_DELAY: float = 2.0
    INFERENCE_RETRY_BACKOFF: float = 2.0

    # Supabase REST backend (empty URL = persistence unavailable)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    SUPABASE_TIMEOUT_SECONDS: int = 30

    RAW_DATA_TABLE: str = "extracted_user_data"
    PROFILE_TABLE: str = "personal_data"

    model_config = {"env_prefix": "", "case_sensitive": True}


settings = Settings()
