"""Application configuration management."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from calendar_digest.calendar.formats import CalendarFormats
from calendar_digest.google import DEFAULT_API_URL


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="CALENDAR_DIGEST_",
        env_file=[
            ".env",  # Project-level defaults (lower priority)
            Path.home() / ".config" / "calendar-digest" / ".env",  # User config (higher priority)
        ],
        env_file_encoding="utf-8",
    )

    # Google API settings
    api_url: str = Field(default=DEFAULT_API_URL, description="Calendar API base URL")
    access_token: str | None = Field(
        default=None, description="OAuth2 bearer token for the Calendar API"
    )
    request_timeout: float = Field(
        default=30.0, gt=0.0, description="Seconds to wait for an API response"
    )
    max_results: int | None = Field(
        default=None, ge=1, le=2500, description="Events per page (API default if unset)"
    )

    # Digest settings
    default_days: int = Field(
        default=7, ge=0, description="Days after the start day to include"
    )
    default_from: str = Field(
        default="1",
        description="Start day: offset, ISO date, =epoch, or weekday name",
    )

    # Paths
    config_dir: Path = Field(
        default=Path.home() / ".config" / "calendar-digest",
        description="Configuration directory",
    )
    calendars_file: str = Field(
        default="calendars.yaml", description="Calendar list filename"
    )
    formats_file: str = Field(
        default="formats.yaml", description="Date format and strings filename"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Path = Field(
        default=Path.home() / ".local" / "state" / "calendar-digest",
        description="Directory for log files (per-calendar logs written here)",
    )
    log_rotation_size_mb: int = Field(
        default=5, ge=1, description="Max size per log file in MB before rotation"
    )
    log_backup_count: int = Field(
        default=3, ge=0, description="Number of rotated log files to keep"
    )

    @property
    def calendars_path(self) -> Path:
        """Full path to calendars file."""
        return self.config_dir / self.calendars_file

    @property
    def formats_path(self) -> Path:
        """Full path to formats file."""
        return self.config_dir / self.formats_file

    def ensure_config_dir(self) -> None:
        """Create config directory if it doesn't exist."""
        self.config_dir.mkdir(parents=True, exist_ok=True)


class CalendarSource(BaseModel):
    """A calendar to include in digests."""

    id: str = Field(description="Google calendar ID")
    name: str | None = Field(default=None, description="Display name")
    enabled: bool = Field(default=True, description="Include in digests")

    @property
    def label(self) -> str:
        return self.name or self.id


def load_calendars(path: Path) -> list[CalendarSource]:
    """Load the calendar list from a YAML file."""
    if not path.exists():
        return []

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return [CalendarSource.model_validate(entry) for entry in data.get("calendars", [])]


def save_calendars(path: Path, calendars: list[CalendarSource]) -> None:
    """Save the calendar list to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(
            {"calendars": [cal.model_dump(exclude_none=True) for cal in calendars]},
            f,
            default_flow_style=False,
            sort_keys=False,
        )


def load_formats(path: Path) -> CalendarFormats:
    """Load date formats and display strings, falling back to the defaults."""
    if not path.exists():
        return CalendarFormats()

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return CalendarFormats.model_validate(data)
