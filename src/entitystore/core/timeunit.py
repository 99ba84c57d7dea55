"""Time units for (value, unit) durations used across the storage API."""

from datetime import timedelta
from enum import Enum
from typing import Optional, Union

class TimeUnit(Enum):
    """Unit of a duration expressed as a plain number"""
    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"

    def to_timedelta(self, value: float) -> timedelta:
        return timedelta(**{self.value: value})

    def to_seconds(self, value: float) -> float:
        return self.to_timedelta(value).total_seconds()

    @classmethod
    def parse(cls, value: Union[str, "TimeUnit"]) -> "TimeUnit":
        """Accept a TimeUnit, its value or its name in any case"""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        try:
            return cls(text.lower())
        except ValueError:
            return cls[text.upper()]

def to_timedelta(value: Optional[float], unit: Optional[TimeUnit]) -> Optional[timedelta]:
    """Combine a (value, unit) pair; None when either half is missing"""
    if value is None or unit is None:
        return None
    return TimeUnit.parse(unit).to_timedelta(value)

__all__ = ["TimeUnit", "to_timedelta"]
