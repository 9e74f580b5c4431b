from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Edge-style handlers write with the service role

    # Astria
    astria_api_key: Optional[str] = None
    astria_api_base_url: str = "https://api.astria.ai"
    astria_base_tune_id: int = 1504944  # Flux1.dev base model
    astria_upload_timeout: float = 30.0
    astria_tune_timeout: float = 60.0
    astria_status_timeout: float = 30.0
    astria_generation_timeout: float = 120.0

    # OpenAI
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"

    # Resend
    resend_api_key: Optional[str] = None
    resend_from: str = "AI Headshots <onboarding@resend.dev>"
    site_url: str = "http://localhost:3000"

    # Training
    training_poll_enabled: bool = True
    training_poll_interval_seconds: float = 15.0
    training_poll_max_attempts: Optional[int] = None  # None polls until a terminal status
    mock_training_seconds: int = 60

    # App
    app_name: str = "ai-headshots"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "*"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    generation_rate_limit: str = "20/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
