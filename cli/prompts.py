"""Console I/O wrapper and parsers for the values typed at the prompts."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Callable

from rental.errors import InvalidValueError, MalformedInputError
from rental.models import require_non_negative

DATE_FORMAT = "%Y-%m-%d"
DATE_HINT = "yyyy-MM-dd"


class Console:
    """Reads answers and writes lines; swap the callables to script a session."""

    def __init__(
        self,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ) -> None:
        self._read = read
        self._write = write

    def ask(self, prompt: str) -> str:
        return (self._read(prompt) or "").strip()

    def say(self, text: str = "") -> None:
        self._write(text)


def parse_decimal(label: str, raw: str) -> Decimal:
    try:
        value = Decimal((raw or "").strip())
    except InvalidOperation:
        raise MalformedInputError(f"Invalid {label.lower()}: '{raw}' is not a number.") from None
    if not value.is_finite():
        raise MalformedInputError(f"Invalid {label.lower()}: '{raw}' is not a number.")
    return value


def parse_int(label: str, raw: str) -> int:
    try:
        return int((raw or "").strip())
    except ValueError:
        raise MalformedInputError(f"Invalid {label.lower()}: '{raw}' is not a whole number.") from None


def parse_date(label: str, raw: str) -> date:
    try:
        return datetime.strptime((raw or "").strip(), DATE_FORMAT).date()
    except ValueError:
        raise MalformedInputError(f"Invalid {label.lower()} format. Use {DATE_HINT}.") from None


def ask_amount(console: Console, prompt: str, label: str) -> Decimal:
    return require_non_negative(label, parse_decimal(label, console.ask(prompt)))


def ask_count(console: Console, prompt: str, label: str) -> int:
    value = parse_int(label, console.ask(prompt))
    if value < 0:
        raise InvalidValueError(f"{label} cannot be negative.")
    return value


def ask_date(console: Console, prompt: str, label: str) -> date:
    return parse_date(label, console.ask(prompt))
