"""Typed LOUNGE_* environment configuration, read once by config.settings."""

from decimal import Decimal
from typing import Annotated, Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class LoungeSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LOUNGE_", extra="ignore", case_sensitive=False)

    secret_key: str = "dev-secret-change-me"
    debug: bool = False
    # Comma separated, e.g. LOUNGE_ALLOWED_HOSTS=lounge.example.com,localhost
    allowed_hosts: Annotated[list[str], NoDecode] = ["localhost", "127.0.0.1"]

    # Database
    db_engine: Literal["sqlite", "postgres"] = "sqlite"
    db_name: Optional[str] = None
    db_user: str = "lounge"
    db_password: str = ""
    db_host: str = "localhost"
    db_port: int = 5432

    # Fraction of the receipt subtotal charged as tax, e.g. 0.08
    tax_rate: Decimal = Decimal("0")

    # Logging
    log_level: str = "INFO"

    @field_validator("allowed_hosts", mode="before")
    @classmethod
    def split_hosts(cls, value):
        if isinstance(value, str):
            return [host.strip() for host in value.split(",") if host.strip()]
        return value

    @field_validator("tax_rate")
    @classmethod
    def tax_rate_is_fraction(cls, value: Decimal) -> Decimal:
        if not value.is_finite() or value < 0:
            raise ValueError("tax_rate must be a non-negative number")
        return value

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, value: str) -> str:
        return value.upper()
