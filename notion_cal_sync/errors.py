from __future__ import annotations


class SyncError(Exception):
    pass


class ConnectivityError(SyncError):
    pass


class ValidationError(SyncError, ValueError):
    pass


class RecordSyncError(SyncError):
    def __init__(self, record_id: str, label: str, reason: str):
        super().__init__(f"{label}: {reason}")
        self.record_id = record_id
        self.label = label
        self.reason = reason
