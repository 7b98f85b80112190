"""Application configuration using pydantic settings with structured sections."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from wallet_core.domain.exceptions import MalformedAmountError
from wallet_core.domain.value_objects import Money


class DatabaseSettings(BaseModel):
    url: str = "sqlite:///./wallet.db"
    echo: bool = False
    pool_size: int | None = None
    max_overflow: int | None = None
    # Concurrent debits of one account must serialize; see UnitOfWork.
    isolation_level: str = "SERIALIZABLE"


class LedgerSettings(BaseModel):
    default_opening_balance: str = "1000"

    @field_validator("default_opening_balance")
    @classmethod
    def _must_be_positive_decimal(cls, value: str) -> str:
        try:
            amount = Money.parse(value)
        except MalformedAmountError as e:
            raise ValueError(str(e)) from e
        if not amount.is_positive():
            raise ValueError("default opening balance must be positive")
        return value

    @property
    def opening_balance(self) -> Money:
        return Money.parse(self.default_opening_balance)


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


class MetricsSettings(BaseModel):
    enabled: bool = True
    # Histograms are named {prefix}_queries and {prefix}_storage_queries
    prefix: str = "wallet"


class Settings(BaseSettings):
    """Top-level settings, read from WALLET_* variables and an optional .env.

    Nested fields use a double underscore, e.g. WALLET_DATABASE__URL.
    """

    model_config = SettingsConfigDict(
        env_prefix="WALLET_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"

    database: DatabaseSettings = DatabaseSettings()
    ledger: LedgerSettings = LedgerSettings()
    logging: LoggingSettings = LoggingSettings()
    metrics: MetricsSettings = MetricsSettings()


@lru_cache()
def get_settings() -> Settings:
    return Settings()
