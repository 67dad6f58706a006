from typing import List, Union
import logging

from pydantic import AnyHttpUrl, Field, validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    PROJECT_NAME: str = "Translation Billing Service"
    API_V1_STR: str = "/api/v1"

    # Allowed origins for the staff portal; "*" for the public functions
    BACKEND_CORS_ORIGINS: List[Union[str, AnyHttpUrl]] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = [
        "authorization",
        "x-client-info",
        "apikey",
        "content-type",
    ]

    @validator("BACKEND_CORS_ORIGINS", "CORS_ALLOW_HEADERS", pre=True)
    def assemble_comma_list(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Database
    DATABASE_URI: str = "sqlite:///./billing.db"
    SQL_DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True

    # Billing rules
    PAID_THRESHOLD: float = Field(
        default=0.01,
        description="Remaining balance at or below this amount counts as paid"
    )
    PAYMENT_REQUEST_EXPIRY_DAYS: int = 7

    # Maintenance job: expire stale payment requests
    PAYMENT_REQUEST_EXPIRY_ENABLED: bool = True
    PAYMENT_REQUEST_EXPIRY_HOUR: int = 2  # 0-23
    PAYMENT_REQUEST_EXPIRY_MINUTE: int = 30  # 0-59

    class Config:
        case_sensitive = True
        env_file = ".env"

    @property
    def async_database_uri(self) -> str:
        """Database URL with the async driver for SQLite."""
        if self.DATABASE_URI.startswith("sqlite:///"):
            return self.DATABASE_URI.replace("sqlite:///", "sqlite+aiosqlite:///")
        return self.DATABASE_URI


settings = Settings()
logger.info(f"Loaded settings: API_V1_STR={settings.API_V1_STR}, CORS={settings.BACKEND_CORS_ORIGINS}")
