# tenant_auth/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Literal
import logging
from pathlib import Path

# Configure logging for settings module
logger = logging.getLogger(__name__)
if not logging.getLogger().hasHandlers():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s SETTINGS.PY - [%(levelname)s] - %(message)s'
    )

# This settings.py file is at <project>/tenant_auth/settings.py
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
DOTENV_PATH = PROJECT_ROOT / ".env"

if DOTENV_PATH.exists():
    logger.info(f"SETTINGS.PY: .env file FOUND at explicit path: {DOTENV_PATH}")
else:
    logger.debug(
        f"SETTINGS.PY: .env file NOT FOUND at explicit path: {DOTENV_PATH}. "
        "Will rely on OS env vars or defaults."
    )


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    app_name: str = "Tenant Auth"
    debug_mode: bool = False
    log_level: str = "INFO"

    # SQLite configuration (":memory:" keeps everything in-process)
    sqlite_db_path: str = "./tenant_auth_data.sqlite3"

    # Licensing
    default_licenced_seats: int = Field(
        default=5,
        ge=1,
        description="Seats granted to a newly provisioned tenant, admin included."
    )

    # Credential policy
    max_failed_login_attempts: int = Field(
        default=3,
        ge=1,
        description="Consecutive failed logins after which the account is locked."
    )
    bcrypt_rounds: int = Field(
        default=12,
        ge=4,
        le=31,
        description="bcrypt cost factor used when hashing passwords."
    )
    user_uniqueness: Literal["domain", "email"] = Field(
        default="domain",
        description=(
            "Collision key for new users: 'domain' rejects a registrant whose email "
            "domain is already used by an active user, 'email' only rejects the exact address."
        )
    )

    model_config = SettingsConfigDict(
        env_file=DOTENV_PATH if DOTENV_PATH.exists() else None,
        env_prefix="TENANT_AUTH_",
        extra="ignore",
        env_file_encoding='utf-8'
    )


# Initialize settings instance
settings = Settings()

logger.info(
    f"SETTINGS.PY: sqlite_db_path='{settings.sqlite_db_path}', "
    f"default_licenced_seats={settings.default_licenced_seats}, "
    f"max_failed_login_attempts={settings.max_failed_login_attempts}, "
    f"user_uniqueness='{settings.user_uniqueness}'"
)
