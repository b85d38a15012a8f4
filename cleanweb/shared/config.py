# cleanweb/shared/config.py
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_ROOT = Path(__file__).resolve().parents[1]


class AppEnv(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


class Settings(BaseSettings):
    """
    Central Configuration Registry.
    Strictly typed and validated via Pydantic.
    """

    # --- Application Meta ---
    APP_NAME: str = "cleanweb"
    APP_ENV: AppEnv = AppEnv.PRODUCTION

    # --- Hosting ---
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    HTTPS_PORT: Optional[int] = None
    SSL_CERTFILE: Optional[str] = None
    SSL_KEYFILE: Optional[str] = None
    FORWARDED_ALLOW_IPS: str = "127.0.0.1"

    # --- Security ---
    SECRET_KEY: str = "change-me-for-production"

    # --- Logging & Observability ---
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: LogFormat = LogFormat.CONSOLE
    OTEL_SERVICE_NAME: str = "cleanweb"
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[str] = None

    # --- Request Pipeline ---
    STATIC_ROOT: str = str(_PACKAGE_ROOT / "adapters" / "web" / "wwwroot")
    ERROR_PATH: str = "/Error"

    # 30 days, the browser-side lifetime of the HSTS policy
    HSTS_MAX_AGE_SECONDS: int = 30 * 24 * 60 * 60
    HSTS_INCLUDE_SUBDOMAINS: bool = False
    HSTS_PRELOAD: bool = False
    HSTS_EXCLUDED_HOSTS: List[str] = ["localhost", "127.0.0.1", "[::1]"]

    HTTPS_REDIRECT_STATUS_CODE: int = 307

    ANTIFORGERY_COOKIE_NAME: str = "cleanweb.antiforgery"
    ANTIFORGERY_FORM_FIELD: str = "__RequestVerificationToken"
    ANTIFORGERY_HEADER_NAME: str = "X-CSRF-TOKEN"
    ANTIFORGERY_TOKEN_MAX_AGE: int = 2 * 60 * 60

    # --- Interactive Components ---
    INTERACTIVE_ENDPOINT: str = "/_interactive"
    CIRCUIT_MAX_ACTIVE: int = 500

    # --- Sample Data ---
    SEED_PRODUCTS: List[str] = ["Keyboard", "Mouse", "Monitor"]

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == AppEnv.DEVELOPMENT

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
