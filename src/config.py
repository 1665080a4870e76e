"""
Runtime settings, read from ``PAYMENTS_*`` environment variables or a ``.env`` file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Payments ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="PAYMENTS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Per-record rejections are logged at WARNING
    log_level: str = "WARNING"
    log_format: str = "%(levelname)s: %(message)s"

    # Print processed/rejected counts to stderr after the run
    report_summary: bool = True


settings = Settings()


def get_settings() -> Settings:
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment"""
    global settings
    settings = Settings()
    return settings
