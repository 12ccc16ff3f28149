from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase (required, no fallback values)
    supabase_url: str
    supabase_key: str
    supabase_service_role_key: Optional[str] = None

    # App
    app_name: str = "textpost"
    debug: bool = False
    environment: str = "development"  # development | production
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    auth_rate_limit: str = "10/minute"

    # Client serving
    static_dir: str = "dist"
    dev_server_url: str = "http://localhost:5173"
    public_url: str = "http://localhost:3000"  # base for the OAuth redirect

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def oauth_redirect_url(self) -> str:
        return f"{self.public_url.rstrip('/')}/auth/callback"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore",
        frozen=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process. Raises a ValidationError when Supabase credentials are missing."""
    return Settings()
