"""Locale strings and strftime patterns used when describing events."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CalendarFormats(BaseModel):
    """Date/time format patterns and display strings."""

    day: str = Field(default="%a, %d %b %Y", description="Short day label")
    longday: str = Field(default="%A, %d %B %Y", description="Long day label")
    time: str = Field(default="%H:%M", description="Time of day")
    at: str = Field(default=" at %H:%M", description="Time suffix appended to a day label")

    all_day: str = Field(default="All day")
    starting: str = Field(default="Starting at ")
    from_: str = Field(default="From ", alias="from")
    to: str = Field(default=" to ")
    unknown: str = Field(default="Unknown time")

    shortdays: list[str] = Field(
        default=["mon", "tue", "wed", "thu", "fri", "sat", "sun"],
        description="Abbreviated weekday names, Monday first",
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("shortdays")
    @classmethod
    def validate_shortdays(cls, value: list[str]) -> list[str]:
        """Weekday names must cover the whole week exactly once."""
        days = [day.lower() for day in value]
        if len(days) != 7 or len(set(days)) != 7:
            raise ValueError("shortdays must list seven distinct weekday names")
        return days


DEFAULT_FORMATS = CalendarFormats()
