"""
Base repository - typed CRUD over one collection

Every operation loads the whole collection, transforms it in memory and
writes the whole collection back. Two interleaved read-modify-write cycles on
the same collection from different processes race and the last write wins.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import ValidationError

from tripkeeper.core.protocols import CollectionHandleProtocol
from tripkeeper.core.logger import get_logger
from tripkeeper.models.base import Record

logger = get_logger(__name__)

T = TypeVar("T", bound=Record)

Draft = Union[Dict[str, Any], Record]


class StorageWriteError(Exception):
    """A collection could not be written back (usually the store is full)"""

    def __init__(self, collection: str):
        super().__init__(f"Failed to write collection '{collection}'")
        self.collection = collection


class DanglingReferenceError(ValueError):
    """A write referenced a record that does not exist"""


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BaseRepository(Generic[T]):
    """CRUD over a single collection handle"""

    model: Type[T]

    def __init__(self, handle: CollectionHandleProtocol):
        self.handle = handle

    @property
    def collection(self) -> str:
        return self.handle.name

    # ---------- raw access ----------

    def _load_raw(self) -> List[Dict[str, Any]]:
        return self.handle.load()

    def _save_raw(self, records: List[Dict[str, Any]]) -> None:
        if not self.handle.save(records):
            raise StorageWriteError(self.collection)

    def _parse(self, record: Dict[str, Any]) -> Optional[T]:
        """Validate a stored record; invalid ones are skipped but stay in storage"""
        try:
            return self.model.model_validate(record)
        except ValidationError as e:
            logger.warning(
                f"Skipping invalid record {record.get('id', '?')} in '{self.collection}': "
                f"{e.error_count()} validation errors"
            )
            return None

    def _coerce_draft(self, draft: Draft) -> Dict[str, Any]:
        if isinstance(draft, Record):
            return draft.to_record()
        return dict(draft)

    # ---------- CRUD ----------

    def list(self) -> List[T]:
        """All valid records in stored order"""
        parsed = (self._parse(record) for record in self._load_raw())
        return [entity for entity in parsed if entity is not None]

    def get_by_id(self, record_id: str) -> Optional[T]:
        if not record_id:
            return None
        for record in self._load_raw():
            if record.get("id") == record_id:
                return self._parse(record)
        return None

    def create(self, draft: Draft) -> T:
        """Assign id and timestamps, append, write back

        Raises:
            pydantic.ValidationError: the draft is not a valid record
            StorageWriteError: the collection could not be written
        """
        now = utc_now()
        data = self._coerce_draft(draft)
        for key in ("id", "createdAt", "updatedAt", "created_at", "updated_at"):
            data.pop(key, None)

        entity = self.model.model_validate({**data, "id": new_id()})
        entity = entity.model_copy(update={"created_at": now, "updated_at": now})
        self._before_write(entity)

        records = self._load_raw()
        records.append(entity.to_record())
        self._save_raw(records)

        logger.debug(f"Created {self.model.__name__} {entity.id}")
        return entity

    def update(self, entity: Draft) -> Optional[T]:
        """Replace a stored record, keeping its created_at

        Returns None when no record with that id exists.
        """
        data = self._coerce_draft(entity)
        record_id = data.get("id")
        records = self._load_raw()

        for index, stored in enumerate(records):
            if stored.get("id") != record_id:
                continue

            for key in ("createdAt", "updatedAt", "created_at", "updated_at"):
                data.pop(key, None)
            data["createdAt"] = stored.get("createdAt")
            updated = self.model.model_validate(data)
            updated = updated.model_copy(update={"updated_at": utc_now()})
            self._before_write(updated)

            records[index] = updated.to_record()
            self._save_raw(records)
            logger.debug(f"Updated {self.model.__name__} {record_id}")
            return updated

        logger.warning(f"Cannot update missing {self.model.__name__} {record_id}")
        return None

    def delete(self, record_id: str) -> bool:
        """Filter the record out; False when it was not there or the write failed"""
        records = self._load_raw()
        remaining = [record for record in records if record.get("id") != record_id]
        if len(remaining) == len(records):
            return False

        if not self.handle.save(remaining):
            logger.error(f"Failed to delete {self.model.__name__} {record_id}")
            return False

        logger.debug(f"Deleted {self.model.__name__} {record_id}")
        return True

    def _before_write(self, entity: T) -> None:
        """Hook for reference checks before an entity is written"""

    def filter(self, **criteria: Any) -> List[T]:
        """Records whose attributes equal every given value"""
        return [
            entity
            for entity in self.list()
            if all(getattr(entity, key, None) == value for key, value in criteria.items())
        ]
