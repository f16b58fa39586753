"""Star history point schemas and series helpers."""

from datetime import UTC, date, datetime

from pydantic import BaseModel, Field, field_validator

from .base import SchemaBase


def to_day(moment: datetime | date | str) -> str:
    """Return the UTC calendar day (YYYY-MM-DD) for a timestamp."""
    if isinstance(moment, str):
        moment = datetime.fromisoformat(moment.replace("Z", "+00:00"))
    if isinstance(moment, datetime):
        if moment.tzinfo is not None:
            moment = moment.astimezone(UTC)
        return moment.date().isoformat()
    return moment.isoformat()


class StarSample(BaseModel):
    """One estimated point on a repository's cumulative star curve."""

    date: str = Field(description="Calendar day (YYYY-MM-DD)")
    count: int = Field(ge=0, description="Cumulative stars on that day")

    @field_validator("date")
    @classmethod
    def _validate_date(cls, value: str) -> str:
        date.fromisoformat(value)
        return value


class StarHistoryRead(SchemaBase):
    """Stored star history for one repository."""

    repository_id: int
    saved_at: datetime
    history: list[StarSample]


def merge_series(existing: list[StarSample], extra: list[StarSample]) -> list[StarSample]:
    """Merge two series keyed by date; points in ``extra`` win on conflicts.

    The result is sorted by count, matching how stored series are read.
    """
    by_date: dict[str, int] = {p.date: p.count for p in existing}
    for point in extra:
        by_date[point.date] = point.count
    merged = [StarSample(date=d, count=c) for d, c in by_date.items()]
    return sorted(merged, key=lambda p: (p.count, p.date))


def days_to_star_count(series: list[StarSample], target: int) -> int | None:
    """Days from the first sample until the series first reaches ``target`` stars.

    Returns None when the target is never reached or the series is empty.
    """
    if not series:
        return None
    ordered = sorted(series, key=lambda p: p.date)
    start = date.fromisoformat(ordered[0].date)
    for point in ordered:
        if point.count >= target:
            return (date.fromisoformat(point.date) - start).days
    return None
