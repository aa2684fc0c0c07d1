from __future__ import annotations

import logging
from typing import Mapping, Optional

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .config import GoogleAccount
from .errors import RecordSyncError
from .models import CalendarEvent, CalendarTarget

SCOPES = ["https://www.googleapis.com/auth/calendar"]

PERSONAL = "personal"
WORK = "work"

TARGET_ACCOUNTS = {
    CalendarTarget.PRS_PERSONAL: PERSONAL,
    CalendarTarget.PRS_WORK: WORK,
    CalendarTarget.FITNESS: PERSONAL,
    CalendarTarget.NORMAL_WAKE_UP: PERSONAL,
    CalendarTarget.SLEEP_IN: PERSONAL,
}


def _load_credentials(client_secrets_file: str, token_file: str) -> Credentials:
    creds = None
    if token_file:
        try:
            creds = Credentials.from_authorized_user_file(token_file, SCOPES)
        except (OSError, ValueError):
            creds = None
    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            creds.refresh(Request())
        else:
            flow = InstalledAppFlow.from_client_secrets_file(client_secrets_file, SCOPES)
            creds = flow.run_local_server(port=0)
        with open(token_file, "w") as token:
            token.write(creds.to_json())
    return creds


def build_service(account: GoogleAccount):
    creds = _load_credentials(account.client_secrets, account.token_file)
    return build("calendar", "v3", credentials=creds)


class CalendarService:
    def __init__(self, services: Mapping[str, object], calendar_ids: Mapping[CalendarTarget, str]):
        self.services = dict(services)
        self.calendar_ids = dict(calendar_ids)

    def _service_for(self, target: CalendarTarget):
        return self.services.get(TARGET_ACCOUNTS[target])

    def check_connection(self) -> bool:
        ok = True
        for account, service in self.services.items():
            try:
                result = service.calendarList().list().execute()
            except (HttpError, GoogleAuthError, OSError) as exc:
                logging.error("Google Calendar connection failed for %s account: %s", account, exc)
                ok = False
                continue
            visible = {item.get("id") for item in result.get("items", [])}
            logging.info("Google Calendar connection successful for %s account, found %d calendars", account, len(visible))
            for target, calendar_id in self.calendar_ids.items():
                if calendar_id and TARGET_ACCOUNTS[target] == account and calendar_id not in visible:
                    logging.warning("Calendar %s for %s is not visible to the %s account", calendar_id, target.value, account)
        return ok

    def calendar_id_for(self, target: CalendarTarget) -> Optional[str]:
        return self.calendar_ids.get(target) or None

    def insert_event(self, event: CalendarEvent) -> str:
        calendar_id = self.calendar_id_for(event.target)
        if not calendar_id:
            raise RecordSyncError(event.source_id, event.title, f"no calendar configured for {event.target.value}")
        service = self._service_for(event.target)
        if service is None:
            raise RecordSyncError(
                event.source_id, event.title, f"no Google account connected for {TARGET_ACCOUNTS[event.target]} events"
            )
        created = service.events().insert(calendarId=calendar_id, body=event.to_gcal_body()).execute()
        logging.info("Created calendar event %s on %s", event.title, event.target.value)
        return created.get("id", "")
