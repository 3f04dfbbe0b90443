"""Runtime settings and logging setup."""

from __future__ import annotations

import logging
import os

from pydantic import BaseModel, Field, field_validator

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class LodgingSettings(BaseModel):
    rooms: list[int] = Field(default_factory=lambda: [1, 2, 3], min_length=1)
    months_displayed: int = Field(default=4, ge=1, le=24)
    week_start: str = "sunday"
    log_level: str = "INFO"
    seed_sample_data: bool = True

    @field_validator("rooms")
    @classmethod
    def _unique_rooms(cls, value: list[int]) -> list[int]:
        if len(set(value)) != len(value):
            raise ValueError("room numbers must be unique")
        return sorted(value)

    @field_validator("week_start")
    @classmethod
    def _known_week_start(cls, value: str) -> str:
        value = value.lower()
        if value not in ("sunday", "monday"):
            raise ValueError("week_start must be 'sunday' or 'monday'")
        return value

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> LodgingSettings:
        """Build settings from ``LODGING_*`` environment variables."""
        env = os.environ if environ is None else environ
        values: dict = {}
        if env.get("LODGING_ROOMS"):
            values["rooms"] = [
                int(part) for part in env["LODGING_ROOMS"].split(",") if part.strip()
            ]
        if env.get("LODGING_MONTHS_DISPLAYED"):
            values["months_displayed"] = env["LODGING_MONTHS_DISPLAYED"]
        if env.get("LODGING_WEEK_START"):
            values["week_start"] = env["LODGING_WEEK_START"]
        if env.get("LODGING_LOG_LEVEL"):
            values["log_level"] = env["LODGING_LOG_LEVEL"].upper()
        if env.get("LODGING_SEED_SAMPLE_DATA"):
            values["seed_sample_data"] = env["LODGING_SEED_SAMPLE_DATA"]
        return cls(**values)


def configure_logging(settings: LodgingSettings) -> None:
    """Install a root handler once; later calls only adjust the level."""
    logging.basicConfig(level=settings.log_level, format=_LOG_FORMAT)
    logging.getLogger("lodging").setLevel(settings.log_level)
