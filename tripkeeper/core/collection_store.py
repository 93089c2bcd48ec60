"""
Collection store
Whole-array JSON collections over the key-value store
"""

import json
from typing import Any, Dict, List

from tripkeeper.core.logger import get_logger
from tripkeeper.core.protocols import KeyValueStoreProtocol
from tripkeeper.core.storage import StorageQuotaExceeded

logger = get_logger(__name__)

# Collection names (store keys)
TRIPS = "trips"
COMPANIONS = "companions"
PERSONAL_DOCUMENTS = "personalDocuments"
TRAVEL_VISAS = "travelVisas"
ITINERARY = "itinerary"
TRANSPORTATIONS = "transportations"
MEALS = "meals"
ACCOMMODATIONS = "accommodations"
ALBUMS = "albums"

ALL_COLLECTIONS = [
    TRIPS,
    COMPANIONS,
    PERSONAL_DOCUMENTS,
    TRAVEL_VISAS,
    ITINERARY,
    TRANSPORTATIONS,
    MEALS,
    ACCOMMODATIONS,
    ALBUMS,
]

ALBUM_MEDIA_PREFIX = "album_media_"


class CollectionStore:
    """get/put/delete facade: every read parses the full array, every write replaces it"""

    def __init__(self, kv_store: KeyValueStoreProtocol):
        self.kv_store = kv_store

    def load(self, name: str) -> List[Dict[str, Any]]:
        """Load a collection; missing or corrupt state reads as empty"""
        raw = self.kv_store.get_item(name)
        if not raw:
            return []

        try:
            records = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Collection '{name}' is not valid JSON, reading as empty: {e}")
            return []

        if not isinstance(records, list):
            logger.warning(
                f"Collection '{name}' holds {type(records).__name__}, expected a list; reading as empty"
            )
            return []

        return [record for record in records if isinstance(record, dict)]

    def save(self, name: str, records: List[Dict[str, Any]]) -> bool:
        """Serialize and write the full collection, returning False on failure"""
        try:
            payload = json.dumps(records, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Collection '{name}' could not be serialized: {e}")
            return False

        try:
            self.kv_store.set_item(name, payload)
        except StorageQuotaExceeded as e:
            logger.error(f"Storage quota exceeded while saving '{name}': {e}")
            return False
        except Exception as e:
            logger.error(f"Failed to save collection '{name}': {e}", exc_info=True)
            return False

        logger.debug(f"Saved collection '{name}' ({len(records)} records)")
        return True

    def remove(self, name: str) -> bool:
        """Drop a collection entirely"""
        try:
            self.kv_store.remove_item(name)
            return True
        except Exception as e:
            logger.error(f"Failed to remove collection '{name}': {e}", exc_info=True)
            return False

    def handle(self, name: str) -> "CollectionHandle":
        return CollectionHandle(self, name)


class CollectionHandle:
    """A single named collection bound to its store"""

    def __init__(self, store: CollectionStore, name: str):
        self.store = store
        self.name = name

    def load(self) -> List[Dict[str, Any]]:
        return self.store.load(self.name)

    def save(self, records: List[Dict[str, Any]]) -> bool:
        return self.store.save(self.name, records)

    def remove(self) -> bool:
        return self.store.remove(self.name)

    def __repr__(self) -> str:
        return f"CollectionHandle({self.name!r})"


class MediaStore:
    """Two-level store: one media collection per album"""

    def __init__(self, store: CollectionStore):
        self.store = store

    def for_album(self, album_id: str) -> CollectionHandle:
        if not album_id:
            raise ValueError("album_id is required")
        return self.store.handle(f"{ALBUM_MEDIA_PREFIX}{album_id}")

    def album_ids(self) -> List[str]:
        """Album ids that currently own a media partition"""
        return [
            key[len(ALBUM_MEDIA_PREFIX):]
            for key in self.store.kv_store.keys()
            if key.startswith(ALBUM_MEDIA_PREFIX)
        ]
