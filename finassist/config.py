from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    db_path: str = "chat_history.json"
    log_level: str = "INFO"
    default_currency: str = "MXN"
    history_limit: int = 50


@lru_cache
def get_settings() -> Settings:
    return Settings()
