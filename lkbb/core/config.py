from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings

DEFAULT_SECRET_KEY = "CHANGE_ME_DEV_SECRET"


class Settings(BaseSettings):
    APP_NAME: str = "LKBB Competition Admin API"
    DATABASE_URL: str = "sqlite:///./lkbb.db"
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    DEFAULT_RESET_PASSWORD: str = "12345678"
    LOG_LEVEL: str = "INFO"
    # Allowed drift of a score's weight total from 1.0 before a warning is logged
    SCORE_WEIGHT_TOLERANCE: float = 0.001
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
