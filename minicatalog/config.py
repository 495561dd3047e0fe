"""Application configuration loaded from environment variables and .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./minis.db"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Image storage
    IMAGE_ROOT: str = "public/images/minis"
    IMAGE_URL_PREFIX: str = "/images/minis"
    IMAGE_FORMAT: str = "webp"
    ORIGINAL_QUALITY: int = 100
    THUMBNAIL_SIZE: int = 50
    THUMBNAIL_QUALITY: int = 80

    # Writer defaults
    DEFAULT_PAINTED_BY_ID: int = 1
    DEFAULT_BASE_SIZE_ID: int = 3
    VALIDATE_REFERENCES: bool = True


settings = Settings()
