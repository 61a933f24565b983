"""Rolling time window applied to comparison and migration reads."""

from datetime import datetime, timedelta

from pydantic import BaseModel, Field

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class TimeWindow(BaseModel):
    """Closed interval of rows eligible for comparison or migration."""

    start: datetime = Field(..., description="Window start (inclusive)")
    end: datetime = Field(..., description="Window end (inclusive)")

    @classmethod
    def last_days(cls, days: int, now: datetime | None = None) -> "TimeWindow":
        """Build the window ``[now - days, now]``."""
        end = now if now is not None else datetime.now()
        return cls(start=end - timedelta(days=days), end=end)

    def describe(self) -> str:
        """Render the window for reports."""
        return f"{self.start.strftime(TIME_FORMAT)} to {self.end.strftime(TIME_FORMAT)}"
