from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    # App
    app_name: str = "ColdSync RBAC"

    # Logging
    log_level: str = "INFO"
    log_dir: str = "/var/log/coldsync"
    log_to_file: bool = False
    log_to_console: bool = True

    # Emit one DEBUG record per authorization decision
    log_decisions: bool = False

    model_config = SettingsConfigDict(
        env_prefix="COLDSYNC_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
