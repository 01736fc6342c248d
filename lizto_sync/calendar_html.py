"""
Read appointment cards and hover tooltips out of Lizto calendar HTML.

Lizto renders its agenda with Vuetify's v-calendar (weekly "daily" view).
Every appointment is a timed event inside ``.v-calendar-daily__body``:

    <div class="v-event-timed primary white--text" style="top: ...">
      <div class="v-event-draggable" style="background-color: rgb(...)">
        <p>Laura  Gómez</p>
        <p>Manicure tradicional</p>
        <p>con Ana María</p>
        <p>8:45 am - 9:00 am</p>
      </div>
    </div>

Hovering a card opens a menu (``div.v-menu__content.menuable__content__active``)
whose <p> lines carry the details the card does not show:

    Nueva Reserva Creada
    miércoles, 19 de noviembre/2025
    8:45 am - 9:00 am
    Laura Gómez 3001234567

Both parsers accept an HTML fragment (``outerHTML`` from the live page, or a
saved page in tests) and return raw, un-normalized text.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple

from bs4 import BeautifulSoup, Tag  # type: ignore[import]

CARD_CLASS = "v-event-draggable"

_BG_COLOR_RE = re.compile(r"background-color\s*:\s*([^;]+)", re.IGNORECASE)

RawOverlayLines = Tuple[str, ...]


@dataclass(frozen=True)
class RawCardFields:
    """Text straight from a card: no trimming beyond what the DOM gives."""

    client: str = ""
    service: str = ""
    specialist: str = ""
    time_range: str = ""
    background_color: str = ""


def _style_background(tag: Tag | None) -> str:
    while isinstance(tag, Tag):
        m = _BG_COLOR_RE.search(tag.get("style", "") or "")
        if m:
            return m.group(1).strip()
        tag = tag.parent
    return ""


def parse_card_html(html: str, background_color: str | None = None) -> RawCardFields | None:
    """
    Parse one timed event into RawCardFields.

    Lines are positional: client, service, "con <specialist>", time range.
    Missing lines come back as "". ``background_color`` overrides the inline
    style (the live page passes the computed style). Returns None when the
    fragment has no card at all.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    card = soup.find(class_=CARD_CLASS)
    if not card:
        return None

    lines: List[str] = [p.get_text(separator=" ") for p in card.find_all("p")]
    lines += [""] * (4 - len(lines))

    return RawCardFields(
        client=lines[0],
        service=lines[1],
        specialist=lines[2],
        time_range=lines[3],
        background_color=background_color if background_color else _style_background(card),
    )


def parse_overlay_html(html: str | None) -> RawOverlayLines:
    """
    Split a tooltip into trimmed, non-empty text lines.

    The tooltip is normally a stack of <p>; when it is not (partially
    rendered menu) fall back to its plain text lines.
    """
    if not html:
        return ()
    soup = BeautifulSoup(html, "html.parser")
    paragraphs = soup.find_all("p")
    if paragraphs:
        lines = [p.get_text(separator=" ", strip=True) for p in paragraphs]
    else:
        lines = [l.strip() for l in soup.get_text(separator="\n").split("\n")]
    return tuple(l for l in lines if l)
