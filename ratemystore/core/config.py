from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    DB_HOST: str = Field("localhost")
    DB_PORT: int = Field(5432)
    DB_USER: str = Field("postgres")
    DB_PASSWORD: str = Field("postgres")
    DB_NAME: str = Field("ratemystore")
    DATABASE_URL: Optional[str] = Field(None)
    AUTO_CREATE_TABLES: bool = Field(True)

    # App
    APP_HOST: str = Field("0.0.0.0")
    APP_PORT: int = Field(8000)
    ENVIRONMENT: str = Field("development")
    CORS_ORIGINS: List[str] = Field(["http://localhost:5173", "http://localhost:3000"])
    ADMIN_SIGNUP_ENABLED: bool = Field(True)

    # JWT / Auth
    SECRET_KEY: str = Field("defaultsecret")
    ALGORITHM: str = Field("HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(15)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(7)
    REFRESH_COOKIE_NAME: str = Field("refresh_token")
    REFRESH_COOKIE_PATH: str = Field("/")

    # Logging
    LOG_LEVEL: str = Field("INFO")
    LOG_FORMAT: str = Field("json")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow"
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
