from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional, Union

from .models import (
    Activity,
    Category,
    ExerciseSession,
    SleepSession,
    WakeCategory,
)

Number = Union[int, float]

DEFAULT_REPOSITORY = "Unknown Repository"
DEFAULT_WORKOUT = "Workout"
DEFAULT_SLEEP_LABEL = "Unknown"


def _prop(page: Any, name: str) -> dict:
    props = page.get("properties") if isinstance(page, dict) else None
    if not isinstance(props, dict):
        return {}
    value = props.get(name)
    return value if isinstance(value, dict) else {}


def _plain_text(segments: Any) -> str:
    if not isinstance(segments, list):
        return ""
    parts = []
    for segment in segments:
        if isinstance(segment, dict) and isinstance(segment.get("plain_text"), str):
            parts.append(segment["plain_text"])
    return "".join(parts)


def _title(page: Any, name: str, default: str) -> str:
    return _plain_text(_prop(page, name).get("title")).strip() or default


def _rich_text(page: Any, name: str, default: str = "") -> str:
    return _plain_text(_prop(page, name).get("rich_text")) or default


def _number(page: Any, name: str, minimum: Number = 0, maximum: Optional[Number] = None) -> Number:
    value = _prop(page, name).get("number")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    value = max(minimum, value)
    if maximum is not None:
        value = min(maximum, value)
    return value


def _select(page: Any, name: str) -> Optional[str]:
    selected = _prop(page, name).get("select")
    if isinstance(selected, dict) and isinstance(selected.get("name"), str):
        return selected["name"]
    return None


def _date(page: Any, name: str) -> Optional[date]:
    value = _prop(page, name).get("date")
    start = value.get("start") if isinstance(value, dict) else None
    if not isinstance(start, str):
        return None
    try:
        return date.fromisoformat(start[:10])
    except ValueError:
        logging.debug("Ignoring malformed %s value %r", name, start)
        return None


def parse_timestamp(text: str, require_time: bool = False) -> Optional[datetime]:
    text = text.strip()
    if not text or (require_time and "T" not in text):
        return None
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logging.debug("Ignoring malformed timestamp %r", text)
        return None


def _page_id(page: Any) -> str:
    if isinstance(page, dict) and page.get("id") is not None:
        return str(page["id"])
    return ""


def _category(name: Optional[str]) -> Category:
    try:
        return Category(name)
    except ValueError:
        return Category.PERSONAL


def normalize_activity(page: Any) -> Activity:
    return Activity(
        id=_page_id(page),
        repository=_title(page, "Repository", DEFAULT_REPOSITORY),
        date=_date(page, "Date"),
        commit_count=_number(page, "Commits Count"),
        category=_category(_select(page, "Project Type")),
        commit_messages=_rich_text(page, "Commit Messages"),
        pr_titles=_rich_text(page, "PR Titles"),
        lines_added=_number(page, "Lines Added"),
        lines_deleted=_number(page, "Lines Deleted"),
    )


def normalize_exercise(page: Any) -> ExerciseSession:
    return ExerciseSession(
        id=_page_id(page),
        name=_title(page, "Activity Name", DEFAULT_WORKOUT),
        date=_date(page, "Date"),
        type=_select(page, "Activity Type") or DEFAULT_WORKOUT,
        start_time=parse_timestamp(_rich_text(page, "Start Time"), require_time=True),
        duration_minutes=_number(page, "Duration"),
        distance_miles=_number(page, "Distance"),
    )


def normalize_sleep(page: Any) -> SleepSession:
    wake_category = (
        WakeCategory.NORMAL_WAKE_UP
        if _select(page, "Google Calendar") == WakeCategory.NORMAL_WAKE_UP.value
        else WakeCategory.SLEEP_IN
    )
    return SleepSession(
        id=_page_id(page),
        label=_title(page, "Night of", DEFAULT_SLEEP_LABEL),
        night_of_date=_date(page, "Night of Date"),
        bedtime=parse_timestamp(_rich_text(page, "Bedtime")),
        wake_time=parse_timestamp(_rich_text(page, "Wake Time")),
        duration_hours=_number(page, "Sleep Duration"),
        deep_minutes=_number(page, "Deep Sleep"),
        rem_minutes=_number(page, "REM Sleep"),
        light_minutes=_number(page, "Light Sleep"),
        efficiency_percent=_number(page, "Efficiency", maximum=100),
        wake_category=wake_category,
    )
