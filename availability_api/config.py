from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str

    db_pool_min_size: int = 0
    db_pool_max_size: int = 5
    db_timeout: float = 30

    # scan granularity for candidate slot starts, not the slot length
    slot_interval_minutes: int = 30

    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    model_config = {"env_file": ".env"}


settings = Settings()
