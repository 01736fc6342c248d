"""
MongoDB-backed appointment store.

Documents are keyed by the business identity (Cliente, Servicio, Hora, Fecha);
Lizto exposes no appointment id. Every write replaces the whole document.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import OperationFailure

from .extract import KEY_FIELDS

logger = logging.getLogger(__name__)

SERVER_SELECTION_TIMEOUT_MS = 10000


class MongoAppointmentStore:
    """Thin wrapper over one collection; owns the client when it created it."""

    def __init__(self, collection: Collection, client: MongoClient | None = None):
        self.collection = collection
        self._client = client

    @classmethod
    def connect(cls, uri: str, db_name: str, collection_name: str) -> "MongoAppointmentStore":
        client: MongoClient = MongoClient(
            uri, serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS, tz_aware=True
        )
        return cls(client[db_name][collection_name], client=client)

    def ping(self) -> None:
        """Raise pymongo.errors.PyMongoError when the server is unreachable."""
        self.collection.database.client.admin.command("ping")

    def ensure_indexes(self) -> None:
        try:
            self.collection.create_index(
                [(f, ASCENDING) for f in KEY_FIELDS], unique=True, name="business_key"
            )
        except OperationFailure as e:
            # Existing duplicates from older syncs block the unique index
            logger.warning("Could not create unique business key index: %s", e)
        self.collection.create_index([("lastSyncedAt", DESCENDING)], name="last_synced")

    def upsert(self, filter: Dict, document: Dict) -> None:
        self.collection.replace_one(filter, document, upsert=True)

    def count(self) -> int:
        return self.collection.count_documents({})

    def find_latest(self) -> Optional[Dict]:
        return self.collection.find_one({}, sort=[("lastSyncedAt", DESCENDING)])

    def find_all(self) -> List[Dict]:
        return list(
            self.collection.find({}, {"_id": 0}).sort("appointmentAt", ASCENDING)
        )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("MongoDB connection closed")
