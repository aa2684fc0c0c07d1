"""Event formatter tests"""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from conftest import activity_page, number, rich_text, select, sleep_page, workout_page
from notion_cal_sync.errors import RecordSyncError
from notion_cal_sync.formatters import (
    format_activity_event,
    format_event,
    format_exercise_event,
    format_number,
    format_sleep_event,
    short_repository_name,
)
from notion_cal_sync.models import CalendarTarget
from notion_cal_sync.transform import normalize_activity, normalize_exercise, normalize_sleep

NY = ZoneInfo("America/New_York")


# =============================================================================
# Activity
# =============================================================================


def test_activity_title_with_lines_suffix():
    event = format_activity_event(normalize_activity(activity_page()))

    assert event.title == "widgets: 3 commits (+40/-10 lines)"
    assert event.all_day is True
    assert event.start == event.end == date(2025, 1, 13)
    assert event.target is CalendarTarget.PRS_PERSONAL


def test_activity_title_without_lines_suffix():
    page = activity_page(**{"Lines Added": number(0), "Lines Deleted": number(0)})

    event = format_activity_event(normalize_activity(page))

    assert event.title == "widgets: 3 commits"
    assert "Lines:" not in event.description


def test_activity_work_variant_targets_work_calendar():
    event = format_event(normalize_activity(activity_page()), work=True)

    assert event.target is CalendarTarget.PRS_WORK


def test_activity_description_lists_pr_and_commits():
    event = format_activity_event(normalize_activity(activity_page()))

    assert event.description.splitlines()[:4] == [
        "Repository: octo/widgets",
        "Commits: 3",
        "Lines: +40/-10",
        "PR: Add widgets",
    ]
    assert event.description.endswith("fix: things\nfeat: stuff")


def test_activity_defaults_render_fallbacks():
    activity = normalize_activity({"id": "bare", "properties": {"Date": {"date": {"start": "2025-01-13"}}}})

    event = format_activity_event(activity)

    assert event.title == "Unknown Repository: 0 commits"
    assert "PR: None" in event.description


def test_activity_without_date_is_a_record_error():
    activity = normalize_activity({"id": "bare", "properties": {}})

    with pytest.raises(RecordSyncError) as excinfo:
        format_activity_event(activity)

    assert excinfo.value.record_id == "bare"
    assert excinfo.value.label == "Unknown Repository"


@pytest.mark.parametrize(
    "repository,expected",
    [("octo/widgets", "widgets"), ("widgets", "widgets"), ("octo/", "octo/"), ("a/b/c", "b")],
)
def test_short_repository_name(repository, expected):
    assert short_repository_name(repository) == expected


def test_all_day_body_uses_exclusive_end_date():
    body = format_activity_event(normalize_activity(activity_page())).to_gcal_body()

    assert body["start"] == {"date": "2025-01-13"}
    assert body["end"] == {"date": "2025-01-14"}
    assert body["extendedProperties"]["private"]["source_id"] == "act-1"


# =============================================================================
# Exercise
# =============================================================================


def test_exercise_uses_explicit_start_time():
    event = format_exercise_event(normalize_exercise(workout_page()), tz=NY)

    assert event.start == datetime(2025, 1, 14, 7, 30, tzinfo=NY)
    assert event.end - event.start == timedelta(minutes=45)
    assert event.title == "Running - 5.2 miles"
    assert event.target is CalendarTarget.FITNESS


def test_exercise_defaults_to_noon_and_thirty_minutes():
    page = workout_page(**{"Start Time": rich_text(""), "Duration": number(0), "Distance": number(0)})

    event = format_exercise_event(normalize_exercise(page), tz=NY)

    assert event.start == datetime(2025, 1, 14, 12, 0, tzinfo=NY)
    assert event.end == datetime(2025, 1, 14, 12, 30, tzinfo=NY)
    assert event.title == "Morning Run"


def test_exercise_body_is_timed():
    body = format_exercise_event(normalize_exercise(workout_page()), tz=NY).to_gcal_body()

    assert body["start"] == {"dateTime": "2025-01-14T07:30:00-05:00"}
    assert body["end"] == {"dateTime": "2025-01-14T08:15:00-05:00"}


def test_exercise_without_date_or_start_is_a_record_error():
    session = normalize_exercise({"id": "wo-x", "properties": {}})

    with pytest.raises(RecordSyncError, match="Workout"):
        format_exercise_event(session)


# =============================================================================
# Sleep
# =============================================================================


def test_sleep_event_spans_bedtime_to_wake_time():
    event = format_sleep_event(normalize_sleep(sleep_page()), tz=NY)

    assert event.start == datetime(2025, 1, 12, 23, 10, tzinfo=NY)
    assert event.end == datetime(2025, 1, 13, 7, 5, tzinfo=NY)
    assert event.title == "Sleep - 7.5hrs (91% efficiency)"
    assert event.target is CalendarTarget.NORMAL_WAKE_UP
    assert "- Deep sleep: 80 min" in event.description


def test_sleep_in_calendar_selected_by_default():
    event = format_sleep_event(normalize_sleep(sleep_page(**{"Google Calendar": select("Sleep In")})))

    assert event.target is CalendarTarget.SLEEP_IN


def test_sleep_negative_span_is_not_corrected():
    """Wake time before bedtime is surfaced as-is (unresolved upstream edge case)"""
    page = sleep_page(**{"Bedtime": rich_text("2025-01-13T07:05:00"), "Wake Time": rich_text("2025-01-12T23:10:00")})

    event = format_sleep_event(normalize_sleep(page))

    assert event.end < event.start
    assert event.to_gcal_body()["end"] == {"dateTime": "2025-01-12T23:10:00"}


def test_sleep_without_timestamps_is_a_record_error():
    page = sleep_page(**{"Bedtime": rich_text("")})

    with pytest.raises(RecordSyncError, match="Sunday night"):
        format_sleep_event(normalize_sleep(page))


def test_format_number_drops_trailing_zero():
    assert format_number(8.0) == "8"
    assert format_number(7.25) == "7.25"
    assert format_number(3) == "3"


def test_format_event_rejects_unknown_record():
    with pytest.raises(TypeError):
        format_event(object())
