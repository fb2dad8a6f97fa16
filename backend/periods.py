import calendar
from datetime import date, datetime, time

END_OF_DAY = time(23, 59, 59, 999000)


def to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def parse_datetime(value: str) -> datetime:
    normalized = value.strip()
    if normalized.endswith(("Z", "z")):
        normalized = normalized[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid date: {value!r}. Use YYYY-MM-DD or ISO 8601.") from exc
    return to_local_naive(parsed)


def end_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), END_OF_DAY)


def month_end(value: date) -> date:
    last_day = calendar.monthrange(value.year, value.month)[1]
    return value.replace(day=last_day)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    if not 1 <= month <= 12:
        raise ValueError("Month must be between 1 and 12.")
    first_day = date(year, month, 1)
    return (
        datetime.combine(first_day, time.min),
        datetime.combine(month_end(first_day), END_OF_DAY),
    )
