from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Provider credentials (never returned by any endpoint)
    groq_api_key: str = ""
    deepseek_api_key: str = ""
    together_api_key: str = ""
    huggingface_api_key: str = ""
    openrouter_api_key: str = ""

    # Sent as HTTP-Referer to providers that attribute traffic by origin
    frontend_url: str = "https://yourusername.github.io"

    # Upstream calls
    upstream_timeout_seconds: float = 30.0
    user_agent: str = "JARVIS-AI/2.0"

    # Chat
    history_window: int = 6
    max_message_length: int = 10_000
    min_response_length: int = 10

    # Admission control (fixed window per client address)
    rate_limit_requests: int = 60
    rate_limit_window_seconds: float = 60.0

    # App
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = 3000
    app_version: str = "2.0.0"

    # CORS
    allowed_origins: str = "*"  # comma-separated, e.g. "https://yourusername.github.io,https://your-custom-domain.com"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    # Sentry
    sentry_dsn: str = ""  # leave empty to disable

    @property
    def cors_origins(self) -> list[str]:
        """Development allows any origin; production only the configured list."""
        if self.app_env != "production":
            return ["*"]
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup in non-test environments."""
    errors: list[str] = []

    if settings.rate_limit_requests < 1:
        errors.append("RATE_LIMIT_REQUESTS must be at least 1")

    if settings.rate_limit_window_seconds <= 0:
        errors.append("RATE_LIMIT_WINDOW_SECONDS must be positive")

    if settings.upstream_timeout_seconds <= 0:
        errors.append("UPSTREAM_TIMEOUT_SECONDS must be positive")

    if settings.app_env == "production":
        if settings.allowed_origins == "*":
            errors.append("ALLOWED_ORIGINS must not be '*' in production")
        if settings.app_debug:
            errors.append("APP_DEBUG must be false in production")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
