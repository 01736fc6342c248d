"""
One sync pass over the displayed calendar week, and the weekly sync routine.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from .extract import extract_appointment
from .text_normalize import is_saturday

logger = logging.getLogger(__name__)


@dataclass
class PassSummary:
    processed: int = 0
    skipped: int = 0
    total_documents: int = 0
    latest: Optional[Dict] = None


class WeekSyncEngine:
    """
    Reads every visible card through ``session`` and upserts it into ``store``.

    ``session`` needs visible_events(), read_card(el), reveal(el), next_week(),
    open_calendar().
    ``store`` needs upsert(filter, document), count(), find_latest().
    """

    def __init__(self, session, store, site: str = "", owner: str = ""):
        self.session = session
        self.store = store
        self.site = site
        self.owner = owner
        self.last_summary: PassSummary | None = None

    def run_pass(self) -> int:
        """Sync the currently displayed week. Returns the number of upserts."""
        logger.info("Syncing appointments from Lizto (current view)...")
        elements = self.session.visible_events()
        logger.info("Appointments found on screen: %d", len(elements))

        summary = PassSummary()
        for element in elements:
            try:
                card = self.session.read_card(element)
                if card is None or not card.client.strip():
                    summary.skipped += 1
                    continue

                overlay = self.session.reveal(element)
                record = extract_appointment(card, overlay, site=self.site, owner=self.owner)
                if record is None:
                    summary.skipped += 1
                    continue

                self.store.upsert(record.business_key(), record.to_document())
                summary.processed += 1
            except Exception as e:
                summary.skipped += 1
                logger.error("Error processing an appointment: %s", e)

        summary.total_documents = self.store.count()
        summary.latest = self.store.find_latest()
        logger.info("Total documents in collection: %d", summary.total_documents)
        logger.info("Most recently synced: %s", summary.latest)

        self.last_summary = summary
        return summary.processed

    def sync_once(self, today: date | None = None) -> List[int]:
        """
        Sync the current week; on Saturdays also the following week.

        Returns the processed count of each pass that completed.
        """
        counts = [self.run_pass()]
        logger.info("Current week synced. Appointments processed: %d", counts[0])

        today = today or date.today()
        if is_saturday(today):
            try:
                logger.info("Saturday: syncing next week as well...")
                self.session.next_week()
                counts.append(self.run_pass())
                logger.info("Next week synced. Appointments processed: %d", counts[1])
            except Exception as e:
                logger.error("Error syncing next week: %s", e)
            finally:
                self._back_to_current_week()
        return counts

    def _back_to_current_week(self) -> None:
        # The next tick must start from the current week again
        try:
            self.session.open_calendar()
        except Exception as e:
            logger.error("Could not return to the current week: %s", e)
