"""
Travel database
Wires one key-value store to every repository
"""

from pathlib import Path
from typing import Optional

from tripkeeper.core import collection_store as collections
from tripkeeper.core.collection_store import CollectionStore, MediaStore
from tripkeeper.core.logger import get_logger
from tripkeeper.core.protocols import KeyValueStoreProtocol
from tripkeeper.core.storage import MemoryKeyValueStore, SqliteKeyValueStore
from tripkeeper.models.entities import DEFAULT_ALBUM_COVER
from tripkeeper.repositories import (
    AccommodationRepository,
    AlbumRepository,
    CompanionRepository,
    ItineraryRepository,
    MealRepository,
    MediaRepository,
    PersonalDocumentRepository,
    TransportationRepository,
    TravelVisaRepository,
    TripRepository,
)
from tripkeeper.repositories.documents import EXPIRY_WARNING_DAYS

logger = get_logger(__name__)


class TravelDatabase:
    """All repositories over a single shared store"""

    def __init__(
        self,
        kv_store: KeyValueStoreProtocol,
        default_album_cover: str = DEFAULT_ALBUM_COVER,
        expiry_warning_days: int = EXPIRY_WARNING_DAYS,
    ):
        self.kv_store = kv_store
        self.store = CollectionStore(kv_store)
        self.media_store = MediaStore(self.store)

        self.trips = TripRepository(self.store.handle(collections.TRIPS))
        self.itinerary = ItineraryRepository(self.store.handle(collections.ITINERARY))
        self.accommodations = AccommodationRepository(
            self.store.handle(collections.ACCOMMODATIONS)
        )
        self.transportations = TransportationRepository(
            self.store.handle(collections.TRANSPORTATIONS)
        )
        self.meals = MealRepository(self.store.handle(collections.MEALS))
        self.companions = CompanionRepository(self.store.handle(collections.COMPANIONS))
        self.documents = PersonalDocumentRepository(
            self.store.handle(collections.PERSONAL_DOCUMENTS),
            self.companions,
            expiry_warning_days=expiry_warning_days,
        )
        self.visas = TravelVisaRepository(
            self.store.handle(collections.TRAVEL_VISAS),
            expiry_warning_days=expiry_warning_days,
        )
        self.albums = AlbumRepository(
            self.store.handle(collections.ALBUMS),
            self.media_store,
            default_cover=default_album_cover,
        )
        self.media = MediaRepository(self.media_store, self.albums)

    @classmethod
    def in_memory(cls, quota_bytes: int = 0) -> "TravelDatabase":
        return cls(MemoryKeyValueStore(quota_bytes=quota_bytes))


# Global database instance
_database: Optional[TravelDatabase] = None


def get_db() -> TravelDatabase:
    """Get database instance

    Reads [storage] from the configuration; the SQLite file defaults to
    ~/.config/tripkeeper/tripkeeper.db
    """
    global _database
    if _database is None:
        from tripkeeper.config.loader import get_config
        from tripkeeper.core.paths import get_db_path

        config = get_config()
        backend = config.get("storage.backend", "sqlite")
        quota_bytes = int(config.get("storage.quota_bytes", 0) or 0)
        default_cover = config.get("media.default_album_cover", DEFAULT_ALBUM_COVER)
        warning_days = int(config.get("documents.expiry_warning_days", EXPIRY_WARNING_DAYS))

        if backend == "memory":
            kv_store: KeyValueStoreProtocol = MemoryKeyValueStore(quota_bytes=quota_bytes)
            logger.info("Using in-memory store")
        else:
            configured_path = config.get("storage.path", "")
            if configured_path and str(configured_path).strip():
                db_path = str(Path(configured_path).expanduser())
            else:
                db_path = str(get_db_path())
            kv_store = SqliteKeyValueStore(db_path, quota_bytes=quota_bytes)
            logger.info(f"Using SQLite store: {db_path}")

        _database = TravelDatabase(
            kv_store,
            default_album_cover=default_cover,
            expiry_warning_days=warning_days,
        )

    return _database


def init_db(kv_store: KeyValueStoreProtocol, **kwargs) -> TravelDatabase:
    """Replace the global database (e.g. with an injected store)"""
    global _database
    _database = TravelDatabase(kv_store, **kwargs)
    return _database
