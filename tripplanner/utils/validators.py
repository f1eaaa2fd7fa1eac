import re
from datetime import datetime
from typing import Optional

from tripplanner.core.exceptions import InvalidArgument, InvalidCoordinate

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def validate_coordinates(lat: float, lng: float) -> None:
    if lat is None or lng is None or not (-90 <= lat <= 90) or not (-180 <= lng <= 180):
        raise InvalidCoordinate()


def clean_name(value: Optional[str], field: str = "Name") -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise InvalidArgument(f"{field} cannot be empty")
    return cleaned


def validate_time(value: str, field: str = "time") -> str:
    if not value or not TIME_PATTERN.match(value):
        raise InvalidArgument(f"Invalid {field} '{value}', expected HH:MM")
    return value


def validate_time_range(start_time: str, end_time: str) -> None:
    validate_time(start_time, "start time")
    validate_time(end_time, "end time")
    # zero padded HH:MM compares correctly as text
    if end_time < start_time:
        raise InvalidArgument("End time cannot be before start time")


def validate_day_date(value: str) -> str:
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except (TypeError, ValueError):
        raise InvalidArgument(f"Invalid date '{value}', expected YYYY-MM-DD")
    return value
