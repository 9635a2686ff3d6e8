from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    model_config = ConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Database
    database_url: str = "sqlite+aiosqlite:///./simply_rugby.db"
    db_echo: bool = False
    db_max_retries: int = 3

    # Security (bcrypt work factor, 4-31)
    bcrypt_rounds: int = 12

    # Bootstrap accounts created on an empty user table
    seed_default_users: bool = True
    default_admin_password: Optional[str] = None
    default_coach_password: Optional[str] = None

    # Application
    log_level: str = "INFO"

    def is_sqlite(self) -> bool:
        """Whether the configured URL points at SQLite"""
        return self.database_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
