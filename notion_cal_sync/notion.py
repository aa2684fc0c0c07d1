from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Mapping

import httpx
from notion_client import Client
from notion_client.errors import HTTPResponseError, RequestTimeoutError
from notion_client.helpers import collect_paginated_api

from .errors import ConnectivityError
from .models import RecordKind

PROCESSED_PROPERTY = "Calendar Created"


def build_client(token: str) -> Client:
    return Client(auth=token)


class NotionSource:
    def __init__(self, client: Client, database_ids: Mapping[RecordKind, str]):
        self.client = client
        self.database_ids = dict(database_ids)

    def _database_id(self, kind: RecordKind) -> str:
        database_id = self.database_ids.get(kind)
        if not database_id:
            raise ConnectivityError(f"No Notion database configured for {kind.value} records")
        return database_id

    def check_connection(self, kinds: Iterable[RecordKind] = tuple(RecordKind)) -> bool:
        for kind in kinds:
            try:
                self.client.databases.retrieve(database_id=self._database_id(kind))
            except (ConnectivityError, HTTPResponseError, RequestTimeoutError, httpx.HTTPError) as exc:
                logging.error("Notion connection failed for %s records: %s", kind.value, exc)
                return False
        logging.info("Notion connection successful")
        return True

    def query_unprocessed(self, kind: RecordKind, date_field: str, start: datetime, end: datetime) -> list[dict[str, Any]]:
        start_str = start.date().isoformat()
        end_str = end.date().isoformat()
        logging.info("Reading %s records from %s to %s", kind.value, start_str, end_str)
        try:
            pages = collect_paginated_api(
                self.client.databases.query,
                database_id=self._database_id(kind),
                filter={
                    "and": [
                        {"property": date_field, "date": {"on_or_after": start_str}},
                        {"property": date_field, "date": {"on_or_before": end_str}},
                        {"property": PROCESSED_PROPERTY, "checkbox": {"equals": False}},
                    ]
                },
                sorts=[{"property": date_field, "direction": "ascending"}],
            )
        except (HTTPResponseError, RequestTimeoutError, httpx.HTTPError) as exc:
            raise ConnectivityError(f"Failed to read {kind.value} records from Notion: {exc}") from exc
        logging.info("Found %d %s records without calendar events", len(pages), kind.value)
        return pages

    def set_processed(self, kind: RecordKind, page_id: str) -> None:
        self.client.pages.update(
            page_id=page_id,
            properties={PROCESSED_PROPERTY: {"checkbox": True}},
        )
        logging.debug("Marked %s record %s as processed", kind.value, page_id)
