from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

THROTTLE_LIMIT_BOUNDS = (1, 200)
THROTTLE_WINDOW_MINUTES_BOUNDS = (1, 1440)


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"
    language: str = "en"
    locale_dir: str = "locale"

    # Infra
    database_url: str = "postgresql://app:app@db:5432/app"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_connect_timeout_seconds: int = 3
    redis_url: str = "redis://redis:6379/0"
    redis_socket_timeout_seconds: float = 2.0
    smtp_base_url: str = "http://smtp-mock:8025"
    mail_timeout_seconds: float = 5.0
    store_namespace: str = "gk:"

    # Security / policies
    bcrypt_rounds: int = 12
    session_ttl_seconds: int = 86400
    activation_code_ttl_seconds: int = 1800
    reset_code_ttl_seconds: int = 900
    reset_token_ttl_seconds: int = 600
    email_enabled: bool = True

    # Global throttle
    throttle_limit: int = 5
    throttle_window_minutes: int = 1
    throttle_route_prefixes: list[str] = ["/v1/auth/", "/v1/users/"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def global_throttle_limit(self) -> int:
        low, high = THROTTLE_LIMIT_BOUNDS
        limit = abs(self.throttle_limit)
        if limit < low:
            return 5
        return min(limit, high)

    @property
    def global_throttle_window_seconds(self) -> int:
        low, high = THROTTLE_WINDOW_MINUTES_BOUNDS
        minutes = abs(self.throttle_window_minutes)
        return max(low, min(minutes, high)) * 60


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
