from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./storefront.db"
    SQL_ECHO: bool = False

    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30

    CLIENT_URL: str = "http://localhost:3000"
    PORT: int = 5000
    ENVIRONMENT: str = "development"
    LOG_LEVEL: Optional[str] = None
    LOG_DIR: Optional[str] = None

    # Media host
    MEDIA_ROOT: str = "media"
    MEDIA_URL: str = "/media"
    MEDIA_FOLDER: str = "ecommerce-products"
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024
    PLACEHOLDER_IMAGE: str = "https://via.placeholder.com/400"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
