import logging
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process configuration, read from the environment and an optional .env file."""

    ENV: str = "development"  # development | test | production
    CONFIG_STRICT: bool = False

    DATABASE_URL: Optional[str] = None
    TEST_DATABASE_URL: Optional[str] = None
    STORAGE_BACKEND: str = "auto"

    STREAK_GAP_POLICY: str = "hold"
    STREAK_FREEZE_ALLOWANCE: int = 1

    REMINDER_INTERVAL_SECONDS: int = 30 * 60
    ACTIVITY_LOG_ENABLED: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()


def validate_config(
    strict: Optional[bool] = None,
    settings_obj: Optional[Settings] = None,
    logger: Optional[logging.Logger] = None,
) -> bool:
    """Report missing production configuration.

    Strict mode raises RuntimeError; otherwise each gap is logged as a
    warning and startup continues on the in-memory store. Only key names
    are logged, never values.
    """
    cfg = settings_obj or settings
    log = logger or logging.getLogger("nutritrack")
    strict_mode = getattr(cfg, "CONFIG_STRICT", False) if strict is None else strict

    production = (getattr(cfg, "ENV", "") or "").lower() == "production"
    missing = [key for key in ("DATABASE_URL",) if production and not getattr(cfg, key, None)]
    if not missing:
        return True

    message = f"Missing required configuration: {', '.join(missing)}"
    if strict_mode:
        raise RuntimeError(message)
    log.warning(message, extra={"missing": missing})
    return True
