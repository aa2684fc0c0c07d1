from __future__ import annotations

from datetime import datetime, time, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo

from .errors import RecordSyncError
from .models import (
    Activity,
    CalendarEvent,
    CalendarTarget,
    ExerciseSession,
    NormalizedRecord,
    SleepSession,
    WakeCategory,
)

DEFAULT_WORKOUT_MINUTES = 30
WORKOUT_DEFAULT_START = time(12, 0)


def format_number(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _localize(value: datetime, tz: Optional[ZoneInfo]) -> datetime:
    if tz is not None and value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value


def short_repository_name(repository: str) -> str:
    parts = repository.split("/")
    if len(parts) > 1 and parts[1]:
        return parts[1]
    return repository


def _lines_delta(activity: Activity) -> str:
    return f"+{format_number(activity.lines_added)}/-{format_number(activity.lines_deleted)}"


def activity_title(activity: Activity) -> str:
    title = f"{short_repository_name(activity.repository)}: {format_number(activity.commit_count)} commits"
    if activity.lines_changed > 0:
        title += f" ({_lines_delta(activity)} lines)"
    return title


def activity_description(activity: Activity) -> str:
    lines = [
        f"Repository: {activity.repository}",
        f"Commits: {format_number(activity.commit_count)}",
    ]
    if activity.lines_changed > 0:
        lines.append(f"Lines: {_lines_delta(activity)}")
    pr_titles = activity.pr_titles.strip()
    lines.append(f"PR: {pr_titles or 'None'}")
    lines.append("")
    lines.append("Commit messages:")
    lines.append(activity.commit_messages)
    return "\n".join(lines)


def format_activity_event(activity: Activity, work: bool = False) -> CalendarEvent:
    if activity.date is None:
        raise RecordSyncError(activity.id, activity.label, "record has no date")
    return CalendarEvent(
        title=activity_title(activity),
        description=activity_description(activity),
        start=activity.date,
        end=activity.date,
        target=CalendarTarget.PRS_WORK if work else CalendarTarget.PRS_PERSONAL,
        source_id=activity.id,
        all_day=True,
    )


def exercise_title(session: ExerciseSession) -> str:
    if session.distance_miles > 0:
        return f"{session.type} - {format_number(session.distance_miles)} miles"
    return session.name


def exercise_description(session: ExerciseSession) -> str:
    lines = [
        session.name,
        f"Duration: {format_number(session.duration_minutes)} minutes",
    ]
    if session.distance_miles > 0:
        lines.append(f"Distance: {format_number(session.distance_miles)} miles")
    lines.append(f"Activity type: {session.type}")
    return "\n".join(lines)


def format_exercise_event(session: ExerciseSession, tz: Optional[ZoneInfo] = None) -> CalendarEvent:
    if session.start_time is not None:
        start = session.start_time
    elif session.date is not None:
        start = datetime.combine(session.date, WORKOUT_DEFAULT_START)
    else:
        raise RecordSyncError(session.id, session.label, "record has neither a start time nor a date")
    start = _localize(start, tz)
    end = start + timedelta(minutes=session.duration_minutes or DEFAULT_WORKOUT_MINUTES)
    return CalendarEvent(
        title=exercise_title(session),
        description=exercise_description(session),
        start=start,
        end=end,
        target=CalendarTarget.FITNESS,
        source_id=session.id,
    )


def sleep_title(session: SleepSession) -> str:
    return (
        f"Sleep - {format_number(session.duration_hours)}hrs "
        f"({format_number(session.efficiency_percent)}% efficiency)"
    )


def sleep_description(session: SleepSession) -> str:
    return "\n".join(
        [
            session.label,
            f"Duration: {format_number(session.duration_hours)} hours",
            f"Efficiency: {format_number(session.efficiency_percent)}%",
            "",
            "Sleep stages:",
            f"- Deep sleep: {format_number(session.deep_minutes)} min",
            f"- REM sleep: {format_number(session.rem_minutes)} min",
            f"- Light sleep: {format_number(session.light_minutes)} min",
        ]
    )


def format_sleep_event(session: SleepSession, tz: Optional[ZoneInfo] = None) -> CalendarEvent:
    if session.bedtime is None or session.wake_time is None:
        raise RecordSyncError(session.id, session.label, "record is missing bedtime or wake time")
    # Spans where wake time precedes bedtime are passed through unchanged.
    target = (
        CalendarTarget.NORMAL_WAKE_UP
        if session.wake_category is WakeCategory.NORMAL_WAKE_UP
        else CalendarTarget.SLEEP_IN
    )
    return CalendarEvent(
        title=sleep_title(session),
        description=sleep_description(session),
        start=_localize(session.bedtime, tz),
        end=_localize(session.wake_time, tz),
        target=target,
        source_id=session.id,
    )


def format_event(record: NormalizedRecord, work: bool = False, tz: Optional[ZoneInfo] = None) -> CalendarEvent:
    if isinstance(record, Activity):
        return format_activity_event(record, work=work)
    if isinstance(record, ExerciseSession):
        return format_exercise_event(record, tz=tz)
    if isinstance(record, SleepSession):
        return format_sleep_event(record, tz=tz)
    raise TypeError(f"Unsupported record type {type(record).__name__}")
