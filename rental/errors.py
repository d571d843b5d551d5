"""Exceptions raised by the catalog, the booking engine and the record stores."""

from __future__ import annotations

from typing import Any, Optional


class RentalError(Exception):
    """Base class for every error the console reports back to the operator."""


class DuplicateIdError(RentalError):
    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} ID {record_id} already exists.")
        self.kind = kind
        self.record_id = record_id


class NotFoundError(RentalError):
    kind = "Record"

    def __init__(self, record_id: str) -> None:
        super().__init__(f"{self.kind} {record_id} not found.")
        self.record_id = record_id


class HouseNotFoundError(NotFoundError):
    kind = "House"


class TenantNotFoundError(NotFoundError):
    kind = "Tenant"


class HouseNotAvailableError(RentalError):
    def __init__(self, house_id: str) -> None:
        super().__init__(f"House {house_id} is not available.")
        self.house_id = house_id


class InvalidValueError(RentalError):
    """A value was well-formed but not acceptable (negative amount, bad text)."""


class InvalidDateRangeError(RentalError):
    def __init__(self, start_date: Any, end_date: Any) -> None:
        super().__init__(f"End date {end_date} is before start date {start_date}.")
        self.start_date = start_date
        self.end_date = end_date


class MalformedInputError(RentalError):
    """Console input that could not be parsed as a number or a date."""


class PersistenceError(RentalError):
    """
    Writing a collection to its backing store failed.

    The in-memory change that triggered the save has already been applied and is
    kept; `result` holds whatever the operation would have returned so callers
    can still show it while warning that disk and memory have diverged.
    """

    def __init__(self, message: str, *, collection: Optional[str] = None, result: Any = None) -> None:
        super().__init__(message)
        self.collection = collection
        self.result = result
