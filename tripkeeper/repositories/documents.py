"""
Personal document and travel visa repositories

Both keep their photo obfuscated in the stored record; plain values written by
older clients are still readable. Both classify their expiry date the same way.
"""

import datetime
from typing import List, Optional, Union

from tripkeeper.core.logger import get_logger
from tripkeeper.models.entities import OwnerType, PersonalDocument, TravelVisa
from tripkeeper.processing import obfuscation

from .base import BaseRepository, DanglingReferenceError
from .companions import CompanionRepository

logger = get_logger(__name__)

EXPIRY_WARNING_DAYS = 90
SECONDS_PER_DAY = 24 * 60 * 60

# Expiry classification
EXPIRED = "expired"
EXPIRING = "expiring"
VALID = "valid"
UNKNOWN = "unknown"

ImagePayload = Union[str, bytes]
Moment = Union[datetime.date, datetime.datetime]


def _as_utc_instant(moment: Optional[Moment]) -> datetime.datetime:
    """A date means its UTC midnight; naive datetimes are taken as UTC"""
    if moment is None:
        return datetime.datetime.now(datetime.timezone.utc)
    if not isinstance(moment, datetime.datetime):
        moment = datetime.datetime.combine(moment, datetime.time())
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=datetime.timezone.utc)
    return moment


def days_until(expiry_date: str, now: Optional[Moment] = None) -> Optional[int]:
    """Days left until the expiry date, rounded down; None when unset or unreadable

    The expiry date counts from its UTC midnight, so on the last day before it
    anything after midnight already gives 0.
    """
    if not expiry_date:
        return None
    try:
        expiry = datetime.date.fromisoformat(expiry_date[:10])
    except ValueError:
        logger.debug(f"Unreadable expiry date: {expiry_date!r}")
        return None

    remaining = _as_utc_instant(expiry) - _as_utc_instant(now)
    return int(remaining.total_seconds() // SECONDS_PER_DAY)


def expiry_status(
    expiry_date: str,
    now: Optional[Moment] = None,
    warning_days: int = EXPIRY_WARNING_DAYS,
) -> str:
    """expired (<= 0 days left), expiring (<= warning_days), valid, or unknown"""
    remaining = days_until(expiry_date, now)
    if remaining is None:
        return UNKNOWN
    if remaining <= 0:
        return EXPIRED
    if remaining <= warning_days:
        return EXPIRING
    return VALID


class _ImageMixin:
    """Obfuscated document_image handling shared by documents and visas"""

    def with_image(self, entity, payload: Optional[ImagePayload]):
        """Copy of entity with payload obfuscated into document_image"""
        image = obfuscation.encode(payload) if payload else None
        return entity.model_copy(update={"document_image": image})

    def reveal_image(self, entity) -> Optional[str]:
        """Displayable image (usually a data URL), or None when unset or undecodable"""
        if not entity.document_image:
            return None
        image = obfuscation.decode(entity.document_image)
        if image is None:
            logger.warning(f"Image of {type(entity).__name__} {entity.id} cannot be displayed")
        return image or None


class _ExpiryMixin:
    """Expiry listing over records with an expiry_date"""

    expiry_warning_days: int = EXPIRY_WARNING_DAYS

    def list_expiring(
        self, now: Optional[Moment] = None, warning_days: Optional[int] = None
    ) -> list:
        """Records that are expired or expire within warning_days"""
        if warning_days is None:
            warning_days = self.expiry_warning_days
        return [
            record
            for record in self.list()
            if expiry_status(record.expiry_date, now, warning_days) in (EXPIRED, EXPIRING)
        ]


class PersonalDocumentRepository(_ImageMixin, _ExpiryMixin, BaseRepository[PersonalDocument]):
    model = PersonalDocument

    def __init__(
        self,
        handle,
        companions: CompanionRepository,
        expiry_warning_days: int = EXPIRY_WARNING_DAYS,
    ):
        super().__init__(handle)
        self.companions = companions
        self.expiry_warning_days = expiry_warning_days

    def _before_write(self, entity: PersonalDocument) -> None:
        if entity.owner_type != OwnerType.COMPANION:
            return
        if self.companions.get_by_id(entity.owner_id) is None:
            raise DanglingReferenceError(
                f"Document owner companion '{entity.owner_id}' does not exist"
            )

    def list_by_owner(
        self, owner_type: Optional[OwnerType] = None, owner_id: Optional[str] = None
    ) -> List[PersonalDocument]:
        """Documents filtered by owner type and, optionally, a specific owner"""
        documents = self.list()
        if owner_type is not None:
            documents = [doc for doc in documents if doc.owner_type == owner_type]
        if owner_id:
            documents = [doc for doc in documents if doc.owner_id == owner_id]
        return documents


class TravelVisaRepository(_ImageMixin, _ExpiryMixin, BaseRepository[TravelVisa]):
    model = TravelVisa

    def __init__(self, handle, expiry_warning_days: int = EXPIRY_WARNING_DAYS):
        super().__init__(handle)
        self.expiry_warning_days = expiry_warning_days

    def list_for_trip(self, trip_id: str) -> List[TravelVisa]:
        return self.filter(trip_id=trip_id)
