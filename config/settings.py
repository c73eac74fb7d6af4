"""Pydantic settings for the lending protocol simulator."""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.constants.generic import SECONDS_PER_YEAR, WAD
from src.core.constants.protocol import INTEREST_RATE_PERCENT, PROTOCOL_FEE


class Settings(BaseSettings):
    """Protocol parameters loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LENDING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Interest
    interest_rate_percent: int = Field(default=INTEREST_RATE_PERCENT, ge=0, le=100, description="Simple annual borrow rate in percent")
    seconds_per_year: int = Field(default=SECONDS_PER_YEAR, gt=0, description="Seconds used to prorate yearly interest")

    # Fees
    protocol_fee: int = Field(default=PROTOCOL_FEE, ge=0, le=WAD, description="Borrow fee in WAD (1e15 = 0.1%)")

    # Oracles
    max_price_age_seconds: Optional[int] = Field(
        default=None,
        gt=0,
        description="Reject prices older than this many seconds (disabled when unset)",
    )

    # Messaging
    bridge_gas_limit: int = Field(default=200_000, gt=0, description="Destination gas budgeted per bridge message")
    default_gas_price: int = Field(default=10**9, ge=0, description="Gas price used when a paymaster has no override")
    gas_per_payload_byte: int = Field(default=16, ge=0, description="Extra gas charged per payload byte")

    # Logging
    log_level: str = Field(default="INFO", description="Root log level for the CLI")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lowercase level names."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
