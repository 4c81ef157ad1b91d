from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    base_url: str = "http://localhost:8000"
    database_url: str = "postgresql+psycopg://app:app@db:5432/app"
    redis_url: str = "redis://redis:6379/0"

    jwt_secret: str = "dev-secret-change-me"
    jwt_issuer: str = "taskboard-pro"
    jwt_audience: str = "taskboard-pro"
    jwt_expires_minutes: int = 60

    magic_link_expires_minutes: int = 15
    magic_link_pepper: str = "dev-pepper-change-me"

    # rate limiting (redis)
    rate_limit_enabled: bool = True
    rate_limit_auth_request_link_per_min: int = 20
    rate_limit_auth_redeem_per_min: int = 30

    # logging
    log_level: str = "INFO"
    log_json: bool | None = None

    # realtime fan-out (redis pub/sub)
    realtime_enabled: bool = True
    realtime_channel_prefix: str = "taskboard"

    # daily due-date sweep
    scheduler_enabled: bool = True
    scheduler_poll_seconds: int = 60
    scheduler_run_at: str = "00:00"
    scheduler_lock_seconds: int = 900

settings = Settings()
