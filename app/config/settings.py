from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Used by admin-only RPCs such as broadcasts

    # Retry policy for transient database errors
    retry_max_retries: int = 3
    retry_base_delay: float = 1.0  # seconds, doubled on every retry

    # Connection health check
    connection_check_timeout: float = 5.0
    connection_check_attempts: int = 3

    # Product thumbnails
    favicon_service_url: str = "https://www.google.com/s2/favicons"
    favicon_size: int = 128

    # Front-end base URL, used for share links and notification actions
    public_app_url: str = "http://localhost:3000"

    # App
    app_name: str = "gift-planner-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

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
