from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PARKFLOW_", env_ignore_empty=True, extra="ignore")

    local_only: bool = False
    database_url: str | None = None
    create_tables: bool = False
    local_store_dir: Path = Path("local_store")
    log_level: str = "INFO"


settings = Settings()
