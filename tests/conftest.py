"""Shared fixtures: Notion page builders and in-memory collaborators."""

from typing import Any, Optional

import pytest

from notion_cal_sync.models import CalendarEvent, RecordKind


def title(text: str) -> dict:
    return {"title": [{"plain_text": text}]}


def rich_text(text: str) -> dict:
    return {"rich_text": [{"plain_text": text}]}


def number(value: Any) -> dict:
    return {"number": value}


def select(name: Optional[str]) -> dict:
    return {"select": {"name": name} if name else None}


def date_prop(value: Optional[str]) -> dict:
    return {"date": {"start": value} if value else None}


def activity_page(page_id: str = "act-1", **overrides) -> dict:
    props = {
        "Repository": title("octo/widgets"),
        "Date": date_prop("2025-01-13"),
        "Commits Count": number(3),
        "Project Type": select("Personal"),
        "Commit Messages": rich_text("fix: things\nfeat: stuff"),
        "PR Titles": rich_text("Add widgets"),
        "Lines Added": number(40),
        "Lines Deleted": number(10),
        "Calendar Created": {"checkbox": False},
    }
    props.update(overrides)
    return {"id": page_id, "properties": props}


def workout_page(page_id: str = "wo-1", **overrides) -> dict:
    props = {
        "Activity Name": title("Morning Run"),
        "Date": date_prop("2025-01-14"),
        "Activity Type": select("Running"),
        "Start Time": rich_text("2025-01-14T07:30:00"),
        "Duration": number(45),
        "Distance": number(5.2),
        "Calendar Created": {"checkbox": False},
    }
    props.update(overrides)
    return {"id": page_id, "properties": props}


def sleep_page(page_id: str = "sl-1", **overrides) -> dict:
    props = {
        "Night of": title("Sunday night"),
        "Night of Date": date_prop("2025-01-12"),
        "Bedtime": rich_text("2025-01-12T23:10:00"),
        "Wake Time": rich_text("2025-01-13T07:05:00"),
        "Sleep Duration": number(7.5),
        "Deep Sleep": number(80),
        "REM Sleep": number(95),
        "Light Sleep": number(250),
        "Efficiency": number(91),
        "Google Calendar": select("Normal Wake Up"),
        "Calendar Created": {"checkbox": False},
    }
    props.update(overrides)
    return {"id": page_id, "properties": props}


class FakeSource:
    """In-memory records source that honours the processed flag."""

    def __init__(self, pages_by_kind: dict[RecordKind, list[dict]], reachable: bool = True):
        self.pages_by_kind = pages_by_kind
        self.reachable = reachable
        self.checked_kinds: list[list[RecordKind]] = []
        self.processed: set[str] = set()
        self.fail_marking: set[str] = set()
        self.queries: list[tuple] = []

    def check_connection(self, kinds) -> bool:
        self.checked_kinds.append(list(kinds))
        return self.reachable

    def query_unprocessed(self, kind, date_field, start, end):
        self.queries.append((kind, date_field, start, end))
        return [page for page in self.pages_by_kind.get(kind, []) if page["id"] not in self.processed]

    def set_processed(self, kind, page_id):
        if page_id in self.fail_marking:
            raise RuntimeError("Notion update failed")
        self.processed.add(page_id)


class FakeCalendar:
    """In-memory calendar that can be told to reject specific records."""

    def __init__(self, reachable: bool = True, passing_checks: Optional[int] = None):
        self.reachable = reachable
        self.passing_checks = passing_checks
        self.checks = 0
        self.events: list[CalendarEvent] = []
        self.fail_for: set[str] = set()

    def check_connection(self) -> bool:
        self.checks += 1
        if self.passing_checks is not None and self.checks > self.passing_checks:
            return False
        return self.reachable

    def insert_event(self, event: CalendarEvent) -> str:
        if event.source_id in self.fail_for:
            raise RuntimeError("403 Forbidden")
        self.events.append(event)
        return f"evt-{len(self.events)}"


@pytest.fixture
def calendar() -> FakeCalendar:
    return FakeCalendar()
