"""Typed models for weather queries and normalized reports."""

from __future__ import annotations

from datetime import date as Date
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from ..dates import ReportKind


class WeatherQuery(BaseModel):
    """A single location/date lookup handed to a provider."""

    location: str
    date: Date | None = None

    @field_validator("location")
    @classmethod
    def strip_location(cls, value: str) -> str:
        return value.strip()


class WeatherReport(BaseModel):
    """Provider-independent weather report.

    Temperatures are always Celsius and wind speeds metres per second.
    Fields the backend did not report are ``None`` rather than zero.
    """

    location: str
    resolved_name: str | None = None
    kind: ReportKind
    date: Date
    observed_at: datetime
    temperature: float
    temperature_unit: Literal["C"] = "C"
    conditions: str | None = None
    humidity: float | None = Field(default=None, ge=0, le=100)
    wind_speed: float | None = Field(default=None, ge=0)
    wind_speed_unit: Literal["m/s"] = "m/s"
    provider: str

    def summary(self) -> str:
        """One-line human readable summary."""
        parts = [f"{self.temperature:.1f}°{self.temperature_unit}"]
        if self.conditions:
            parts.append(self.conditions)
        parts.append(
            f"humidity {self.humidity:g}%" if self.humidity is not None else "humidity n/a"
        )
        if self.wind_speed is not None:
            parts.append(f"wind {self.wind_speed:.1f} {self.wind_speed_unit}")
        return f"Weather in '{self.location}' on {self.date.isoformat()}: " + ", ".join(parts)
