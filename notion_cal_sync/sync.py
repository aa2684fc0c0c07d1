from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional, Protocol
from zoneinfo import ZoneInfo

from .errors import ConnectivityError, RecordSyncError
from .formatters import format_event
from .models import (
    CalendarEvent,
    Category,
    NormalizedRecord,
    RecordKind,
    SyncFailure,
    SyncResult,
    SyncTarget,
    Window,
)
from .periods import describe_window
from .transform import normalize_activity, normalize_exercise, normalize_sleep


class RecordSource(Protocol):
    def check_connection(self, kinds: Iterable[RecordKind]) -> bool: ...

    def query_unprocessed(self, kind: RecordKind, date_field: str, start: datetime, end: datetime) -> list[dict[str, Any]]: ...

    def set_processed(self, kind: RecordKind, page_id: str) -> None: ...


class CalendarSink(Protocol):
    def check_connection(self) -> bool: ...

    def insert_event(self, event: CalendarEvent) -> str: ...


@dataclass(frozen=True)
class Domain:
    kind: RecordKind
    date_field: str
    normalize: Callable[[Any], NormalizedRecord]
    category: Optional[Category] = None


DOMAINS = {
    SyncTarget.PERSONAL: Domain(RecordKind.ACTIVITY, "Date", normalize_activity, Category.PERSONAL),
    SyncTarget.WORK: Domain(RecordKind.ACTIVITY, "Date", normalize_activity, Category.WORK),
    SyncTarget.EXERCISE: Domain(RecordKind.EXERCISE, "Date", normalize_exercise),
    SyncTarget.SLEEP: Domain(RecordKind.SLEEP, "Night of Date", normalize_sleep),
}

ALL_TARGETS = (SyncTarget.PERSONAL, SyncTarget.WORK, SyncTarget.EXERCISE, SyncTarget.SLEEP)


def record_kinds(targets: Iterable[SyncTarget]) -> List[RecordKind]:
    kinds: List[RecordKind] = []
    for target in targets:
        kind = DOMAINS[target].kind
        if kind not in kinds:
            kinds.append(kind)
    return kinds


def preflight(source: RecordSource, calendar: CalendarSink, targets: Iterable[SyncTarget] = ALL_TARGETS) -> None:
    if not source.check_connection(record_kinds(targets)):
        raise ConnectivityError("Records source is unreachable")
    if not calendar.check_connection():
        raise ConnectivityError("Calendar service is unreachable")


def _failure(record: NormalizedRecord, exc: Exception) -> SyncFailure:
    if isinstance(exc, RecordSyncError):
        return SyncFailure(record_id=record.id, label=record.label, reason=exc.reason)
    return SyncFailure(record_id=record.id, label=record.label, reason=str(exc) or type(exc).__name__)


def fetch_records(target: SyncTarget, window: Window, source: RecordSource) -> List[NormalizedRecord]:
    domain = DOMAINS[target]
    pages = source.query_unprocessed(domain.kind, domain.date_field, window.start, window.end)
    records = [domain.normalize(page) for page in pages]
    if domain.category is not None:
        records = [record for record in records if record.category is domain.category]
    return records


def run_sync(
    target: SyncTarget,
    window: Window,
    source: RecordSource,
    calendar: CalendarSink,
    dry_run: bool = False,
    tz: Optional[ZoneInfo] = None,
) -> SyncResult:
    preflight(source, calendar, [target])
    return sync_target(target, window, source, calendar, dry_run=dry_run, tz=tz)


def sync_target(
    target: SyncTarget,
    window: Window,
    source: RecordSource,
    calendar: CalendarSink,
    dry_run: bool = False,
    tz: Optional[ZoneInfo] = None,
) -> SyncResult:
    """Sync one target without checking connectivity first."""
    logging.info("%s sync for %s", target.label, describe_window(window))
    domain = DOMAINS[target]
    result = SyncResult(target=target, dry_run=dry_run)
    records = fetch_records(target, window, source)
    if not records:
        logging.info("No %s records found without calendar events", target.label)
        logging.info(result.summary())
        return result

    logging.info("Found %d %s records to sync", len(records), target.label)
    for record in records:
        result.attempted += 1
        try:
            event = format_event(record, work=target is SyncTarget.WORK, tz=tz)
            if dry_run:
                logging.info("DRY RUN create %s %s-%s on %s", event.title, event.start, event.end, event.target.value)
                result.succeeded += 1
                continue
            calendar.insert_event(event)
        except Exception as exc:
            failure = _failure(record, exc)
            logging.error("Failed to sync %s: %s", failure.label, failure.reason)
            result.failed.append(failure)
            continue

        result.succeeded += 1
        try:
            source.set_processed(domain.kind, record.id)
        except Exception as exc:
            # The event exists but the record stays eligible, so a rerun duplicates it.
            logging.error("Created event for %s but could not mark it processed: %s", record.label, exc)
            result.unmarked.append(record.id)
        else:
            logging.info("Synced: %s", record.label)

    logging.info(result.summary())
    return result


def run_all(
    targets: Iterable[SyncTarget],
    window: Window,
    source: RecordSource,
    calendar: CalendarSink,
    dry_run: bool = False,
    tz: Optional[ZoneInfo] = None,
) -> List[SyncResult]:
    targets = list(targets)
    preflight(source, calendar, targets)
    results = []
    for index, target in enumerate(targets):
        if index:
            logging.info("=" * 50)
        results.append(sync_target(target, window, source, calendar, dry_run=dry_run, tz=tz))
    return results
