from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Qubes Air Console API"
    app_version: str = "0.1.0"
    env: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./qubes-air.db"

    cors_allowed_origins: list[str] = ["*"]

    # Upper bound for a single request, storage work included
    request_timeout_s: float = 30.0


settings = Settings()
