"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import WorkingHours
from .domain.validation import MAX_DURATION_MINUTES, MIN_DURATION_MINUTES


class DefaultsConfig(BaseModel):
    """Default settings for availability queries."""
    duration_minutes: int = 60
    start_hour: int = 9
    end_hour: int = 17
    booking_window_days: int = 30
    morning_cutoff_hour: int = 12

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Only durations that can actually be booked."""
        if not MIN_DURATION_MINUTES <= value <= MAX_DURATION_MINUTES:
            raise ValueError(
                f"duration_minutes must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES}"
            )
        return value

    @field_validator("booking_window_days")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("value must be greater than zero")
        return value

    @field_validator("start_hour", "end_hour", "morning_cutoff_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DefaultsConfig":
        """Ensure the practice opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self


class BackendConfig(BaseModel):
    """Managed backend hosting the calendar, booking and payment functions."""
    url: str = ""
    anon_key: str = ""
    timeout_seconds: float = 15.0

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value

    def functions_url(self, name: str) -> str:
        """Get the invocation URL of a backend function."""
        return f"{self.url}/functions/v1/{name}"


class EmailConfig(BaseModel):
    """EmailJS credentials and template ids."""
    service_id: str = ""
    public_key: str = ""
    appointment_template_id: str = ""
    donation_template_id: str = ""


class DonationConfig(BaseModel):
    currency: str = "USD"
    default_amounts: List[int] = Field(default_factory=lambda: [10, 25, 50, 100, 250])
    minimum_amount: float = 5
    maximum_amount: float = 10000

    @model_validator(mode="after")
    def validate_limits(self) -> "DonationConfig":
        if not 0 < self.minimum_amount <= self.maximum_amount:
            raise ValueError("minimum_amount must be positive and not above maximum_amount")
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    backend: BackendConfig = Field(default_factory=BackendConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    donations: DonationConfig = Field(default_factory=DonationConfig)
    timezone: str = "America/New_York"
    locale: str = "en"
    exclude_days: List[int] = Field(default_factory=lambda: [0, 6])  # Sunday, Saturday

    @field_validator("exclude_days")
    @classmethod
    def validate_exclude_days(cls, value: List[int]) -> List[int]:
        """Weekdays use 0=Sunday; duplicates are dropped, order kept."""
        out_of_range = sorted({day for day in value if not 0 <= day <= 6})
        if out_of_range:
            raise ValueError(f"exclude_days must be between 0 (Sunday) and 6 (Saturday), got {out_of_range}")
        return list(dict.fromkeys(value))

    def working_hours(self) -> WorkingHours:
        """Build the domain working hours from the configured defaults."""
        return WorkingHours(
            start_hour=self.defaults.start_hour,
            end_hour=self.defaults.end_hour,
            exclude_weekdays=tuple(self.exclude_days),
            timezone=self.timezone,
        )

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Read and validate a practice config file.

        Raises:
            FileNotFoundError: If ``config_path`` does not exist
            ValueError: On malformed YAML or settings that fail validation
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Copy config.example.yaml to config.yaml and fill in the backend settings, "
                f"or pass --mock to use the bundled calendar."
            )

        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError(f"{config_path} must contain a mapping at the top level.")

        return cls.model_validate(data)


def get_default_config_path() -> Path:
    """``./config.yaml``, or the one next to the package when the cwd has none."""
    candidate = Path.cwd() / "config.yaml"
    if candidate.exists():
        return candidate
    return Path(__file__).resolve().parent.parent / "config.yaml"


def load_config(config_file: Optional[Path] = None, allow_missing: bool = False) -> AppConfig:
    """
    Load the configuration, falling back to defaults when ``allow_missing`` is set.
    """
    config_path = config_file or get_default_config_path()
    if allow_missing and not config_path.exists():
        return AppConfig()
    return AppConfig.load_from_yaml(config_path)
