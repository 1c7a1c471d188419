# therapal/config.py
import os
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Application Settings
    APP_NAME: str = "Therapal API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Database Settings
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite:///./therapal.db")

    # Identity provider tokens (HS256, shared secret)
    SECRET_KEY: str = Field(default="change-me-in-prod", alias="JWT_SECRET_KEY")
    ALGORITHM: str = Field(default="HS256", alias="JWT_ALGORITHM")
    JWT_AUDIENCE: Optional[str] = None

    # CORS Settings
    ALLOWED_ORIGINS: str = os.environ.get("ALLOWED_ORIGINS", "*")

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Realtime: Redis pub/sub when set, in-process otherwise
    REDIS_URL: Optional[str] = os.environ.get("REDIS_URL", None)
    REDIS_CHANNEL_PREFIX: str = "therapal:"

    # IremboPay invoice API
    IREMBOPAY_API_URL: str = "https://api.sandbox.irembopay.com/payments/invoices"
    IREMBOPAY_SECRET_KEY: str = ""
    IREMBOPAY_PAYMENT_ACCOUNT: str = "TST-RWF"
    PAYMENT_TRANSACTION_PREFIX: str = "THERAPAL-"
    PAYMENT_TIMEOUT_SECONDS: float = 30.0
    PAYMENT_EXPIRY_HOURS: int = 24
    PAYMENT_LANGUAGE: str = "EN"

    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings: Settings = get_settings()
