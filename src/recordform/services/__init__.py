"""Services talking to the records API."""

from recordform.services.records import RecordService

__all__ = ["RecordService"]
