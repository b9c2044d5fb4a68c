from typing import List, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


PLACEHOLDER_SECRET_KEY = "your-secret-key-change-this-in-production"


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./attendance.db"
    auto_create_tables: bool = True

    # Security
    secret_key: str = PLACEHOLDER_SECRET_KEY
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # App
    app_name: str = "College Attendance Backend"
    app_version: str = "1.0.0"
    environment: str = "development"
    port: int = 3000
    cors_origins: str = "*"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Attendance
    low_attendance_threshold: float = 75.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @model_validator(mode="after")
    def check_secret_key(self):
        if self.environment == "production" and self.secret_key == PLACEHOLDER_SECRET_KEY:
            raise ValueError("SECRET_KEY must be set to a real value in production")
        return self

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
