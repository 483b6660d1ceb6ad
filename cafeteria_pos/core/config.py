from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Cafeteria POS"
    VERSION: str = "0.1.0"

    # Database
    DATABASE_URL: str = "sqlite:///./cafeteria.db"

    LOG_LEVEL: str = "INFO"

    # Ordering
    # When true, menu items without recipe rows cannot be ordered.
    REQUIRE_RECIPES: bool = False
    ORDER_NUMBER_PREFIX: str = "ORD"

    # Realtime
    CORS_ORIGINS: list[str] = ["*"]
    OUTBOX_BATCH_SIZE: int = 100

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings():
    return Settings()
