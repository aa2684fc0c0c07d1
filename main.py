from __future__ import annotations

import argparse
import logging
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence, Tuple

from google.auth.exceptions import GoogleAuthError

from notion_cal_sync.config import Settings, get_settings
from notion_cal_sync.errors import ConnectivityError, ValidationError
from notion_cal_sync.gcal import PERSONAL, WORK, CalendarService, build_service
from notion_cal_sync.models import SyncTarget, Window
from notion_cal_sync.notion import NotionSource, build_client
from notion_cal_sync.periods import (
    compute_window,
    day_window,
    describe_window,
    last_days_window,
    window_between,
)
from notion_cal_sync.sync import ALL_TARGETS, run_all

Ask = Callable[[str], str]

SYNC_CHOICES = {
    "personal": (SyncTarget.PERSONAL,),
    "work": (SyncTarget.WORK,),
    "exercise": (SyncTarget.EXERCISE,),
    "sleep": (SyncTarget.SLEEP,),
    "all": ALL_TARGETS,
}
MENU = ["personal", "work", "exercise", "sleep", "all"]

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_INVALID = 2
EXIT_CONNECTIVITY = 3


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync Notion records to Google Calendar")
    parser.add_argument("--sync", choices=sorted(SYNC_CHOICES), help="Records to sync", default=None)
    window = parser.add_mutually_exclusive_group()
    window.add_argument("--date", type=str, help="Single day YYYY-MM-DD", default=None)
    window.add_argument("--start", type=str, help="Start date YYYY-MM-DD (requires --end)", default=None)
    window.add_argument("--week", type=int, help="Week number 1-52 (Sunday to Saturday)", default=None)
    window.add_argument("--last-7-days", action="store_true", help="The seven days ending today")
    parser.add_argument("--end", type=str, help="End date YYYY-MM-DD", default=None)
    parser.add_argument("--year", type=int, help="Year for --week, defaults to the current year", default=None)
    parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    parser.add_argument("--dry-run", action="store_true", help="Show events without modifying calendar or Notion")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD") from exc


def parse_week(value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ValidationError(f"Invalid week number '{value}'") from exc


def resolve_window(args: argparse.Namespace, today: date) -> Optional[Window]:
    if args.end and not args.start:
        raise ValidationError("--end requires --start")
    if args.date:
        return day_window(parse_date(args.date))
    if args.start:
        if not args.end:
            raise ValidationError("--start requires --end")
        return window_between(parse_date(args.start), parse_date(args.end))
    if args.week is not None:
        return compute_window(args.year or today.year, args.week)
    if args.last_7_days:
        return last_days_window(today)
    return None


def prompt_targets(ask: Ask) -> Tuple[SyncTarget, ...]:
    print("Available syncs:")
    print("1. GitHub Personal")
    print("2. GitHub Work")
    print("3. Workouts")
    print("4. Sleep")
    print("5. All (GitHub Personal + GitHub Work + Workouts + Sleep)")
    choice = ask("? Choose sync type (1-5): ").strip()
    if choice not in {"1", "2", "3", "4", "5"}:
        raise ValidationError(f"Invalid choice '{choice}', choose 1-5")
    return SYNC_CHOICES[MENU[int(choice) - 1]]


def prompt_window(ask: Ask, today: date) -> Window:
    print("Date options:")
    print("1. Single day")
    print("2. Week number (Sunday to Saturday)")
    print("3. Last 7 days")
    print("4. Custom range")
    choice = ask("? Choose date option (1-4): ").strip()
    if choice == "1":
        answer = ask(f"? Date (YYYY-MM-DD, blank for {today.isoformat()}): ").strip()
        return day_window(parse_date(answer) if answer else today)
    if choice == "2":
        year_answer = ask(f"? Year (blank for {today.year}): ").strip()
        year = int(year_answer) if year_answer.isdigit() else today.year
        return compute_window(year, parse_week(ask("? Week number (1-52): ")))
    if choice == "3":
        return last_days_window(today)
    if choice == "4":
        start = parse_date(ask("? Start date (YYYY-MM-DD): "))
        end = parse_date(ask("? End date (YYYY-MM-DD): "))
        return window_between(start, end)
    raise ValidationError(f"Invalid choice '{choice}', choose 1-4")


def confirm(ask: Ask) -> bool:
    answer = ask("? Proceed with creating calendar events for this period? (y/n): ")
    return answer.strip().lower() in {"y", "yes"}


def print_summary(targets: Sequence[SyncTarget], window: Window) -> None:
    print("Summary:")
    print(f"Total days: {window.days}")
    print(f"Date range: {describe_window(window)} ({window.start.date().isoformat()} - {window.end.date().isoformat()})")
    print(f"Sync type: {', '.join(target.label for target in targets)}")


def build_collaborators(settings: Settings, targets: Sequence[SyncTarget]) -> Tuple[NotionSource, CalendarService]:
    source = NotionSource(build_client(settings.notion_token), settings.database_ids)
    services = {PERSONAL: build_service(settings.personal_account)}
    if SyncTarget.WORK in targets:
        services[WORK] = build_service(settings.work_account)
    return source, CalendarService(services, settings.calendar_ids)


def main(argv: Optional[Sequence[str]] = None, ask: Ask = input) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    settings = get_settings()
    today = datetime.now(settings.timezone).date()

    try:
        targets = SYNC_CHOICES[args.sync] if args.sync else prompt_targets(ask)
        window = resolve_window(args, today) or prompt_window(ask, today)
    except ValidationError as exc:
        logging.error("%s", exc)
        return EXIT_INVALID

    print_summary(targets, window)
    if not args.yes and not confirm(ask):
        logging.info("Operation cancelled")
        return EXIT_OK

    try:
        source, calendar = build_collaborators(settings, targets)
    except (GoogleAuthError, OSError) as exc:
        logging.error("Unable to load Google credentials: %s", exc)
        return EXIT_CONNECTIVITY
    try:
        results = run_all(targets, window, source, calendar, dry_run=args.dry_run, tz=settings.timezone)
    except ConnectivityError as exc:
        logging.error("Aborting sync: %s", exc)
        return EXIT_CONNECTIVITY

    failures: List[str] = []
    for result in results:
        for failure in result.failed:
            failures.append(f"{result.target.label} / {failure.label}: {failure.reason}")
        if result.unmarked:
            logging.warning(
                "%s: %d events were created but not marked in Notion and will be duplicated on rerun",
                result.target.label,
                len(result.unmarked),
            )
    for line in failures:
        logging.error("Failed: %s", line)

    logging.info("Done, %d succeeded and %d failed", sum(r.succeeded for r in results), len(failures))
    return EXIT_FAILURES if failures else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
