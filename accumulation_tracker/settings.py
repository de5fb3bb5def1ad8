from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    ENV: str = "local"
    API_VERSION: str = "dev"
    ALLOW_ORIGINS: str = "*"   # comma-separated
    DB_URL: str | None = None   # e.g. sqlite:///./tracker.db; wins over the DB_* parts
    DB_HOST: str = "db"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "accumulation"

    # Session engine
    ARMING_DELAY_SECONDS: float = 1.0
    REST_WARNING_AT: int = 3
    AUTO_REST_COUNTDOWN: bool = False   # False: clients drive rest ticks
    LIVE_SESSION_IDLE_SECONDS: float = 3600.0   # untouched live sessions are dropped after this

    # Remote table storage (web variant)
    TABLE_API_URL: str = "https://api.airtable.com/v0"
    TABLE_API_BASE_ID: str = ""
    TABLE_API_KEY: str = ""             # set in .env, never commit
    TABLE_API_TIMEOUT: float = 10.0

    # Where presets and histories live: "sql" (DB) or "local" (key-value file)
    STORAGE_BACKEND: Literal["sql", "local"] = "sql"

    # Local key-value storage (native variant)
    LOCAL_STORE_PATH: str = "accumulation_store.json"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        return (
            f"postgresql+psycopg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

@lru_cache
def get_settings() -> Settings:
    return Settings()
