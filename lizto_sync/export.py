"""
Export stored appointments to ICS, CSV, and JSON.
"""
from __future__ import annotations

import csv
import hashlib
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import icalendar
import pytz

# Lizto salons are in Colombia; used for naive datetimes only
TZ_CO = "America/Bogota"

DEFAULT_DURATION = timedelta(minutes=30)

CSV_FIELDS = [
    "Cliente", "Celular", "Servicio", "Especialista", "Hora", "Fecha",
    "Estado", "appointmentAt", "Sede", "Usuario", "bgColor", "lastSyncedAt",
]


def _localize(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return pytz.timezone(TZ_CO).localize(dt)
    return dt


def _uid(doc: dict) -> str:
    key = "|".join(str(doc.get(k) or "") for k in ("Cliente", "Servicio", "Hora", "Fecha"))
    return f"{hashlib.md5(key.encode('utf-8')).hexdigest()}@lizto-calendar-sync"


def export_ics(appointments: list[dict], out_path: str | Path) -> None:
    """Export appointments with a known date to iCalendar (.ics)."""
    cal = icalendar.Calendar()
    cal.add("prodid", "-//Lizto Calendar Sync//ES")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("x-wr-calname", "Lizto")
    cal.add("x-wr-timezone", TZ_CO)

    for a in appointments:
        start = a.get("appointmentAt")
        if not isinstance(start, datetime):
            continue
        start = _localize(start)

        event = icalendar.Event()
        event.add("uid", _uid(a))
        event.add("summary", f"{a.get('Servicio', '')} - {a.get('Cliente', '')}")
        event.add(
            "description",
            f"Especialista: {a.get('Especialista', '')}\n"
            f"Celular: {a.get('Celular') or ''}\n"
            f"Estado: {a.get('Estado', '')}",
        )
        event.add("location", a.get("Sede", ""))
        event.add("dtstart", start)
        event.add("dtend", start + DEFAULT_DURATION)
        event.add("dtstamp", datetime.now(timezone.utc))
        cal.add_component(event)

    Path(out_path).write_bytes(cal.to_ical())


def _plain(value):
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def export_csv(appointments: list[dict], out_path: str | Path) -> None:
    """Export appointments to CSV."""
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=CSV_FIELDS, extrasaction="ignore")
        w.writeheader()
        for a in appointments:
            w.writerow({k: _plain(a.get(k)) for k in CSV_FIELDS})


def _json_default(value):
    return value.isoformat() if isinstance(value, datetime) else str(value)


def export_json(appointments: list[dict], out_path: str | Path) -> None:
    """Export appointments to JSON."""
    Path(out_path).write_text(
        json.dumps(appointments, indent=2, ensure_ascii=False, default=_json_default),
        encoding="utf-8",
    )


def export(appointments: list[dict], out_path: str | Path, fmt: str) -> None:
    """Export to the given format: ics, csv, or json."""
    fmt = fmt.lower()
    if fmt == "ics":
        export_ics(appointments, out_path)
    elif fmt == "csv":
        export_csv(appointments, out_path)
    elif fmt == "json":
        export_json(appointments, out_path)
    else:
        raise ValueError(f"Unsupported format: {fmt}. Use ics, csv, or json.")
