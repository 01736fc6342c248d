"""In-memory stand-ins for the browser session and the MongoDB store."""
import pytest

from lizto_sync.calendar_html import RawCardFields


class FakeStore:
    def __init__(self):
        self.docs = []
        self.upserts = 0

    def upsert(self, filter, document):
        self.upserts += 1
        for i, doc in enumerate(self.docs):
            if all(doc.get(k) == v for k, v in filter.items()):
                self.docs[i] = dict(document)
                return
        self.docs.append(dict(document))

    def count(self):
        return len(self.docs)

    def find_latest(self):
        if not self.docs:
            return None
        return max(self.docs, key=lambda d: d["lastSyncedAt"])


class FakeEvent:
    def __init__(self, card, overlay=(), fail=False):
        self.card = card
        self.overlay = tuple(overlay)
        self.fail = fail


class FakeSession:
    """Shows ``weeks[0]`` until next_week() is called."""

    def __init__(self, *weeks):
        self.weeks = list(weeks) or [[]]
        self.week = 0
        self.revealed = []
        self.next_week_calls = 0
        self.open_calendar_calls = 0
        self.fail_next_week = False

    def visible_events(self):
        return list(self.weeks[self.week])

    def read_card(self, element):
        return element.card

    def reveal(self, element):
        if element.fail:
            raise RuntimeError("hover failed")
        self.revealed.append(element)
        return element.overlay

    def next_week(self):
        self.next_week_calls += 1
        if self.fail_next_week:
            raise RuntimeError("next week button not found")
        self.week += 1

    def open_calendar(self):
        self.open_calendar_calls += 1
        self.week = 0


def make_card(client="Laura Gómez", service="Manicure tradicional",
              specialist="con Ana María", time_range="8:45 am - 9:00 am",
              background_color="rgb(76, 175, 80)"):
    return RawCardFields(
        client=client,
        service=service,
        specialist=specialist,
        time_range=time_range,
        background_color=background_color,
    )


def make_overlay(date_line="miércoles, 19 de noviembre/2025",
                 time_line="8:45 am - 9:00 am",
                 status="Nueva Reserva Creada",
                 phone="3001234567"):
    return [l for l in (status, date_line, time_line, f"Laura Gómez {phone}" if phone else "") if l]


@pytest.fixture
def store():
    return FakeStore()
