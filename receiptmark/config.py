"""
Runtime configuration for the receipts service.

Values are read from the environment once at startup and treated as
read-only afterwards. Dialect constants are not configurable; they live in
rules.py.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


DEFAULT_COUNTY_PORTAL = (
    "https://stlouiscountymo.gov/st-louis-county-departments/public-health/"
    "food-and-restaurants/inspections/"
)


class Settings(BaseModel):
    RECEIPTS_ROOT: Path = Field(
        Path("fixtures") / "receipts",
        description="Directory holding <entity-slug>/<date>.md|json receipts",
    )

    FEED_LIMIT: int = Field(
        20,
        description="Number of newest receipts included in the feed",
    )

    DEFAULT_SOURCE_URL: str = Field(
        DEFAULT_COUNTY_PORTAL,
        description="Source URL used when a receipt has none and no override applies",
    )

    JURISDICTION: str = Field("St. Louis County, MO")

    ISSUER: str = Field("St. Louis County Department of Public Health")

    LOG_LEVEL: str = Field("INFO")

    @field_validator("FEED_LIMIT")
    @classmethod
    def validate_feed_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"FEED_LIMIT must be positive, got {v}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown LOG_LEVEL '{v}'")
        return level

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables, falling back to defaults."""
        values = {}
        for name in cls.model_fields:
            raw = os.getenv(f"RECEIPTMARK_{name}")
            if raw is not None:
                values[name] = raw
        return cls(**values)
