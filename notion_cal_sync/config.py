from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from .models import CalendarTarget, RecordKind

load_dotenv()

DEFAULT_TIMEZONE = "America/New_York"

CALENDAR_ENV = {
    CalendarTarget.PRS_PERSONAL: "PRS_PERSONAL_CALENDAR_ID",
    CalendarTarget.PRS_WORK: "PRS_WORK_CALENDAR_ID",
    CalendarTarget.FITNESS: "FITNESS_CALENDAR_ID",
    CalendarTarget.NORMAL_WAKE_UP: "NORMAL_WAKE_UP_CALENDAR_ID",
    CalendarTarget.SLEEP_IN: "SLEEP_IN_CALENDAR_ID",
}

DATABASE_ENV = {
    RecordKind.ACTIVITY: "NOTION_PRS_DATABASE_ID",
    RecordKind.EXERCISE: "NOTION_WORKOUTS_DATABASE_ID",
    RecordKind.SLEEP: "NOTION_SLEEP_DATABASE_ID",
}


@dataclass
class GoogleAccount:
    client_secrets: str
    token_file: str


@dataclass
class Settings:
    notion_token: str
    database_ids: dict[RecordKind, str]
    calendar_ids: dict[CalendarTarget, str]
    personal_account: GoogleAccount
    work_account: GoogleAccount
    timezone: ZoneInfo = field(default_factory=lambda: ZoneInfo(DEFAULT_TIMEZONE))


def get_timezone() -> ZoneInfo:
    tz_name = os.getenv("TIMEZONE", DEFAULT_TIMEZONE)
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logging.warning("Invalid TIMEZONE %s, falling back to %s", tz_name, DEFAULT_TIMEZONE)
        return ZoneInfo(DEFAULT_TIMEZONE)


def get_settings() -> Settings:
    settings = Settings(
        notion_token=os.getenv("NOTION_TOKEN", ""),
        database_ids={kind: os.getenv(env, "") for kind, env in DATABASE_ENV.items()},
        calendar_ids={target: os.getenv(env, "") for target, env in CALENDAR_ENV.items()},
        personal_account=GoogleAccount(
            client_secrets=os.getenv("PERSONAL_GOOGLE_CLIENT_SECRETS", "credentials.json"),
            token_file=os.getenv("PERSONAL_GOOGLE_TOKEN_FILE", "token.json"),
        ),
        work_account=GoogleAccount(
            client_secrets=os.getenv("WORK_GOOGLE_CLIENT_SECRETS", "work_credentials.json"),
            token_file=os.getenv("WORK_GOOGLE_TOKEN_FILE", "work_token.json"),
        ),
        timezone=get_timezone(),
    )
    if not settings.notion_token:
        logging.warning("NOTION_TOKEN is not set")
    for kind, env in DATABASE_ENV.items():
        if not settings.database_ids[kind]:
            logging.warning("%s is not set", env)
    for target, env in CALENDAR_ENV.items():
        if not settings.calendar_ids[target]:
            logging.warning("%s is not set", env)
    return settings
