"""
Build one normalized appointment from a card and its hover tooltip.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Sequence

from .calendar_html import RawCardFields
from .text_normalize import (
    Status,
    build_timestamp,
    collapse_whitespace,
    find_phone,
    format_date_label,
    has_time,
    parse_date,
    parse_status,
    split_time_range,
    strip_article,
)

logger = logging.getLogger(__name__)

# Stored document keys of the business identity, in filter order
KEY_FIELDS = ("Cliente", "Servicio", "Hora", "Fecha")

_YEAR_RE = re.compile(r"\d{4}")
_STATUS_LINE_RE = re.compile(r"reserva|pagada|cancelada", re.IGNORECASE)


@dataclass
class AppointmentRecord:
    client: str
    service: str = ""
    specialist: str = ""
    time_label: str | None = None
    date_label: str | None = None
    status: Status = Status.NEW_BOOKING
    scheduled_at: datetime | None = None
    phone: int | None = None
    site: str = ""
    owner: str = ""
    color_tag: str = ""
    last_synced_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def business_key(self) -> Dict[str, str | None]:
        """Filter identifying this appointment in the store."""
        return {
            "Cliente": self.client,
            "Servicio": self.service,
            "Hora": self.time_label,
            "Fecha": self.date_label,
        }

    def to_document(self) -> Dict:
        """Full document as stored in the appointments collection."""
        return {
            "Cliente": self.client,
            "Celular": self.phone,
            "Servicio": self.service,
            "Especialista": self.specialist,
            "Hora": self.time_label,
            "Fecha": self.date_label,
            "Estado": self.status.value,
            "appointmentAt": self.scheduled_at,
            "Sede": self.site,
            "Usuario": self.owner,
            "bgColor": self.color_tag,
            "lastSyncedAt": self.last_synced_at,
        }


# ──────────────────────────────────────────────────────────────────
#  Tooltip line pickers
# ──────────────────────────────────────────────────────────────────

def _find_date_line(lines: Sequence[str]) -> str | None:
    # "miércoles, 19 de noviembre/2025": the only line with a year and a slash
    return next((l for l in lines if _YEAR_RE.search(l) and "/" in l), None)


def _find_time_line(lines: Sequence[str]) -> str | None:
    # "8:45 am - 9:00 am"; names like "Camila - 300..." have no parseable start
    for line in lines:
        start, end = split_time_range(line)
        if end is not None and has_time(start):
            return line
    return None


def _find_status_line(lines: Sequence[str]) -> str | None:
    return next((l for l in lines if _STATUS_LINE_RE.search(l)), None)


# ──────────────────────────────────────────────────────────────────
#  Public API
# ──────────────────────────────────────────────────────────────────

def extract_appointment(
    card: RawCardFields,
    overlay: Sequence[str] = (),
    *,
    site: str = "",
    owner: str = "",
    now: datetime | None = None,
) -> AppointmentRecord | None:
    """
    Normalize one calendar card (plus tooltip lines, possibly empty).

    Returns None when the card has no client name; the caller skips it.
    A missing or unparseable date/time does not fail extraction: the record
    is returned with ``scheduled_at`` and ``date_label`` set to None.
    """
    client = collapse_whitespace(card.client)
    if not client:
        return None

    lines = [l for l in (overlay or ()) if l]
    overlay_text = "\n".join(lines)

    date_line = _find_date_line(lines)
    time_line = _find_time_line(lines)
    status_line = _find_status_line(lines)

    card_start, _ = split_time_range(card.time_range)
    overlay_start, _ = split_time_range(time_line)
    start_text = overlay_start or card_start

    parts = parse_date(date_line)
    scheduled_at = build_timestamp(parts, start_text) if start_text else None
    if scheduled_at is None:
        logger.warning(
            "Could not build appointment time for client %s (date line=%r, time=%r)",
            client, date_line, start_text,
        )

    record = AppointmentRecord(
        client=client,
        service=collapse_whitespace(card.service),
        specialist=strip_article(card.specialist),
        time_label=start_text,
        date_label=format_date_label(scheduled_at) if scheduled_at else None,
        status=parse_status(status_line),
        scheduled_at=scheduled_at,
        phone=find_phone(overlay_text),
        site=site,
        owner=owner,
        color_tag=card.background_color,
    )
    if now is not None:
        record.last_synced_at = now
    return record
