from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Optional, Union

from .errors import ValidationError

MANAGED_BY = "notion_cal_sync"


class Category(str, Enum):
    PERSONAL = "Personal"
    WORK = "Work"


class WakeCategory(str, Enum):
    NORMAL_WAKE_UP = "Normal Wake Up"
    SLEEP_IN = "Sleep In"


class RecordKind(str, Enum):
    ACTIVITY = "activity"
    EXERCISE = "exercise"
    SLEEP = "sleep"


class SyncTarget(str, Enum):
    PERSONAL = "personal"
    WORK = "work"
    EXERCISE = "exercise"
    SLEEP = "sleep"

    @property
    def label(self) -> str:
        return TARGET_LABELS[self]


TARGET_LABELS = {
    SyncTarget.PERSONAL: "GitHub Personal",
    SyncTarget.WORK: "GitHub Work",
    SyncTarget.EXERCISE: "Workouts",
    SyncTarget.SLEEP: "Sleep",
}


class CalendarTarget(str, Enum):
    PRS_PERSONAL = "prs_personal"
    PRS_WORK = "prs_work"
    FITNESS = "fitness"
    NORMAL_WAKE_UP = "normal_wake_up"
    SLEEP_IN = "sleep_in"


@dataclass(frozen=True)
class Window:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValidationError(f"Window start {self.start} is after end {self.end}")

    @property
    def days(self) -> int:
        return (self.end.date() - self.start.date()).days + 1


@dataclass
class Activity:
    id: str
    repository: str
    date: Optional[date]
    commit_count: int
    category: Category
    commit_messages: str
    pr_titles: str
    lines_added: int
    lines_deleted: int

    @property
    def lines_changed(self) -> int:
        return self.lines_added + self.lines_deleted

    @property
    def label(self) -> str:
        return self.repository


@dataclass
class ExerciseSession:
    id: str
    name: str
    date: Optional[date]
    type: str
    start_time: Optional[datetime]
    duration_minutes: float
    distance_miles: float

    @property
    def label(self) -> str:
        return self.name


@dataclass
class SleepSession:
    id: str
    label: str
    night_of_date: Optional[date]
    bedtime: Optional[datetime]
    wake_time: Optional[datetime]
    duration_hours: float
    deep_minutes: float
    rem_minutes: float
    light_minutes: float
    efficiency_percent: float
    wake_category: WakeCategory


NormalizedRecord = Union[Activity, ExerciseSession, SleepSession]


@dataclass
class CalendarEvent:
    title: str
    description: str
    start: Union[date, datetime]
    end: Union[date, datetime]
    target: CalendarTarget
    source_id: str
    all_day: bool = False

    def to_gcal_body(self) -> dict:
        if self.all_day:
            # Google treats the all-day end date as exclusive
            start = {"date": self.start.isoformat()}
            end = {"date": (self.end + timedelta(days=1)).isoformat()}
        else:
            start = {"dateTime": self.start.isoformat()}
            end = {"dateTime": self.end.isoformat()}
        return {
            "summary": self.title,
            "description": self.description,
            "start": start,
            "end": end,
            "extendedProperties": {
                "private": {
                    "managed_by": MANAGED_BY,
                    "source_id": self.source_id,
                }
            },
        }


@dataclass
class SyncFailure:
    record_id: str
    label: str
    reason: str


@dataclass
class SyncResult:
    target: SyncTarget
    attempted: int = 0
    succeeded: int = 0
    failed: List[SyncFailure] = field(default_factory=list)
    unmarked: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        line = (
            f"{self.target.label}: attempted {self.attempted}, "
            f"succeeded {self.succeeded}, failed {len(self.failed)}"
        )
        if self.dry_run:
            line += " (dry run)"
        return line
