# auth_code_api/app/core/config.py
import logging
from typing import List
from pydantic_settings import BaseSettings
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_FILE_PATH = BASE_DIR / ".env"

class Settings(BaseSettings):

    # Core
    PROJECT_NAME: str = "Auth Code API"
    DATABASE_URL: str = "sqlite+aiosqlite:///./auth.db"
    SQL_ECHO: bool = False
    # Creates the auth_codes table on startup when alembic is not used
    CREATE_TABLES_ON_STARTUP: bool = True

    # HTTP
    API_PREFIX: str = "/api"
    CORS_ORIGINS: List[str] = ["*"]
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Code generation
    MAX_BATCH_SIZE: int = 1000
    CODE_INSERT_ATTEMPTS: int = 5

    # Logging (loguru)
    LOG_LEVEL: str = "INFO"

    class Config:
        case_sensitive = True
        env_file = ENV_FILE_PATH
        env_file_encoding = 'utf-8'

try:
    settings = Settings()

    if settings.MAX_BATCH_SIZE < 1:
        logging.warning(
            f"MAX_BATCH_SIZE ({settings.MAX_BATCH_SIZE}) is below 1; every generate request will be rejected."
        )

except Exception as e:
    logging.error(f"FATAL: could not load 'settings' from {ENV_FILE_PATH}: {e}")
    raise e
