from __future__ import annotations

import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from rental.errors import InvalidValueError

FIELD_DELIMITER = ","
AGREEMENT_ID_PREFIX = "A"
MONEY_QUANTUM = Decimal("0.01")

_AGREEMENT_ID_RE = re.compile(rf"^{AGREEMENT_ID_PREFIX}(\d+)$")


def to_money(value: Decimal) -> Decimal:
    """Round half-up to cents, the precision the flat files keep."""
    try:
        return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError("amount is too large") from None


def clean_text(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    cleaned = value.strip()
    if FIELD_DELIMITER in cleaned or "\n" in cleaned or "\r" in cleaned:
        raise ValueError(f"must not contain '{FIELD_DELIMITER}' or line breaks")
    return cleaned


def agreement_number(agreement_id: str) -> Optional[int]:
    """Numeric suffix of an "A<n>" identifier, None when it has another shape."""
    match = _AGREEMENT_ID_RE.match(agreement_id or "")
    return int(match.group(1)) if match else None


def format_agreement_id(number: int) -> str:
    return f"{AGREEMENT_ID_PREFIX}{number}"


class House(BaseModel):
    id: str = Field(min_length=1)
    location: str
    price: Decimal = Field(ge=0)
    bedrooms: int = Field(ge=0)
    owner: str
    available: bool = True

    @field_validator("id", "location", "owner", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> Any:
        return clean_text(value)

    @field_validator("price")
    @classmethod
    def _round_price(cls, value: Decimal) -> Decimal:
        return to_money(value)

    def matches_location(self, location: str) -> bool:
        return self.location.casefold() == (location or "").strip().casefold()


class Tenant(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    contact: str
    preferred_location: str

    @field_validator("id", "name", "contact", "preferred_location", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> Any:
        return clean_text(value)


class RentalAgreement(BaseModel):
    """Binds one house to one tenant for a date range. Never edited once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    house_id: str = Field(min_length=1)
    tenant_id: str = Field(min_length=1)
    start_date: date
    end_date: date
    deposit: Decimal = Field(ge=0)

    @field_validator("id", "house_id", "tenant_id", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> Any:
        return clean_text(value)

    @field_validator("deposit")
    @classmethod
    def _round_deposit(cls, value: Decimal) -> Decimal:
        return to_money(value)

    @model_validator(mode="after")
    def _check_dates(self) -> "RentalAgreement":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    @property
    def number(self) -> Optional[int]:
        return agreement_number(self.id)


RecordT = TypeVar("RecordT", bound=BaseModel)


def require_non_negative(label: str, value: Any) -> Decimal:
    """Coerce an amount to Decimal, rejecting negatives before anything is mutated."""
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidValueError(f"{label} must be a number.") from None
    if not number.is_finite():
        raise InvalidValueError(f"{label} must be a finite number.")
    if number < 0:
        raise InvalidValueError(f"{label} cannot be negative.")
    return number


def build_record(model: Type[RecordT], **fields: Any) -> RecordT:
    try:
        return model(**fields)
    except ValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(part) for part in first.get("loc", ())) or model.__name__
        raise InvalidValueError(f"Invalid {where}: {first.get('msg')}") from exc
