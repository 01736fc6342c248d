"""
Turn fragments of rendered Lizto calendar text into typed values.

The calendar is Spanish-only:
- tooltip date lines look like "miércoles, 19 de noviembre/2025"
- time ranges look like "8:45 am - 9:00 am"
- status lines look like "Nueva Reserva Creada", "Cita Pagada", "Cita Cancelada"

Nothing here touches the browser or the store.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from enum import Enum
from typing import NamedTuple


class Status(str, Enum):
    """Appointment status as stored in the ``Estado`` field."""

    NEW_BOOKING = "Nueva reserva creada"
    PAID = "Cita pagada"
    CANCELLED = "Cita cancelada"


class DateParts(NamedTuple):
    day: int
    month: int  # zero-based: 0 = enero
    year: int


# ──────────────────────────────────────────────────────────────────
#  Name tables
# ──────────────────────────────────────────────────────────────────

_MONTH_INDEX = {
    "enero": 0,
    "febrero": 1,
    "marzo": 2,
    "abril": 3,
    "mayo": 4,
    "junio": 5,
    "julio": 6,
    "agosto": 7,
    "septiembre": 8,
    "setiembre": 8,
    "octubre": 9,
    "noviembre": 10,
    "diciembre": 11,
}

# Indexed by datetime.weekday() (Monday == 0)
_DAY_NAMES = ["Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo"]

_MONTH_NAMES = [
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
]

_SATURDAY = 5

_DATE_RE = re.compile(r"(\d{1,2})\s+de\s+([a-záéíóúñ]+)/(\d{4})", re.IGNORECASE)
_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})\s*(am|pm)", re.IGNORECASE)
_PHONE_RE = re.compile(r"\b3\d{9}\b")
_ARTICLE_RE = re.compile(r"^\s*con\b", re.IGNORECASE)


# ──────────────────────────────────────────────────────────────────
#  Text helpers
# ──────────────────────────────────────────────────────────────────

def collapse_whitespace(text: str | None) -> str:
    """Trim and collapse runs of whitespace (newlines, nbsp, tabs) to one space."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def strip_article(text: str | None) -> str:
    """'con Ana María' → 'Ana María'. Only a leading 'con' word is removed."""
    return collapse_whitespace(_ARTICLE_RE.sub("", text or ""))


def split_time_range(text: str | None) -> tuple[str | None, str | None]:
    """Split '8:45 am - 9:00 am' on the first '-' into ('8:45 am', '9:00 am')."""
    if not text or not text.strip():
        return None, None
    start, sep, end = text.partition("-")
    start = start.strip() or None
    end = end.strip() if sep else ""
    return start, end or None


def has_time(text: str | None) -> bool:
    """True when text holds an "H:MM am|pm" time."""
    return bool(text) and _TIME_RE.search(text) is not None


def find_phone(text: str | None) -> int | None:
    """First Colombian mobile number (10 digits starting with 3) in text."""
    if not text:
        return None
    m = _PHONE_RE.search(text)
    if not m:
        return None
    return int(m.group(0))


def is_saturday(day: date) -> bool:
    return day.weekday() == _SATURDAY


# ──────────────────────────────────────────────────────────────────
#  Date / time / status
# ──────────────────────────────────────────────────────────────────

def parse_date(line: str | None) -> DateParts | None:
    """
    Parse the tooltip date line, e.g. "miércoles, 19 de noviembre/2025".

    The weekday prefix is ignored and not checked against the date.
    Returns None when the pattern is absent or the month name is unknown.
    """
    if not line:
        return None
    m = _DATE_RE.search(line)
    if not m:
        return None
    month = _MONTH_INDEX.get(m.group(2).lower())
    if month is None:
        return None
    return DateParts(day=int(m.group(1)), month=month, year=int(m.group(3)))


def parse_status(text: str | None) -> Status:
    """Map free tooltip text to a Status. Paid wins over Cancelled."""
    if not text:
        return Status.NEW_BOOKING
    t = text.lower()
    if "pagada" in t:
        return Status.PAID
    if "cancelada" in t:
        return Status.CANCELLED
    if "reserva" in t:
        return Status.NEW_BOOKING
    return Status.NEW_BOOKING


def _to_24h(hour: int, ampm: str) -> int:
    ampm = ampm.lower()
    if ampm == "pm" and hour < 12:
        return hour + 12
    if ampm == "am" and hour == 12:
        return 0
    return hour


def build_timestamp(parts: DateParts | None, time_text: str | None) -> datetime | None:
    """
    Combine parsed date parts with an "H:MM am|pm" start time.

    The result is in the process's local time zone (tz-aware, so MongoDB
    stores the right instant). Returns None when either input is missing,
    the time does not match, or the date does not exist.
    """
    if not parts or not time_text:
        return None
    m = _TIME_RE.search(time_text)
    if not m:
        return None
    hour = _to_24h(int(m.group(1)), m.group(3))
    minute = int(m.group(2))
    try:
        naive = datetime(parts.year, parts.month + 1, parts.day, hour, minute)
    except ValueError:
        return None
    return naive.astimezone()


def format_date_label(ts: datetime) -> str:
    """datetime → 'Miércoles 19 de Noviembre del 2025'."""
    return (
        f"{_DAY_NAMES[ts.weekday()]} {ts.day} de "
        f"{_MONTH_NAMES[ts.month - 1]} del {ts.year}"
    )
