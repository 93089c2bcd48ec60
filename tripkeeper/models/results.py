"""
Result models returned by the media pipeline and the relation checks
"""

from typing import Any, List, Optional

from pydantic import Field

from .base import BaseModel
from .entities import (
    Accommodation,
    ItineraryDay,
    Meal,
    Media,
    MediaType,
    Transportation,
    Trip,
)


class ProcessedMedia(BaseModel):
    """Outcome of running one file through the media pipeline

    @property fileName - Name of the uploaded file.
    @property success - False when the file could not be decoded.
    @property url - Complete, directly renderable data URL.
    @property thumbnail - Data URL for photos, placeholder path for videos.
    """

    file_name: str
    success: bool
    type: Optional[MediaType] = None
    url: str = ""
    thumbnail: str = ""
    width: Optional[int] = None
    height: Optional[int] = None
    error: Optional[str] = None


class UploadFailure(BaseModel):
    file_name: str
    reason: str


class UploadReport(BaseModel):
    """Final tally of a batch upload, produced after the last file completes"""

    album_id: str
    total: int = 0
    created: List[Media] = Field(default_factory=list)
    failures: List[UploadFailure] = Field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.created)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def done(self) -> bool:
        return self.success_count + self.failure_count == self.total


class DanglingReference(BaseModel):
    """A stored reference that resolves to nothing"""

    collection: str
    record_id: str
    field: str
    missing_id: str


class DayGroup(BaseModel):
    """One itinerary day and the child records assigned to it"""

    day: ItineraryDay
    items: List[Any] = Field(default_factory=list)


class DayOverview(BaseModel):
    """An itinerary day with its references resolved; missing ones are left out"""

    day: ItineraryDay
    trip: Optional[Trip] = None
    accommodation: Optional[Accommodation] = None
    transportations: List[Transportation] = Field(default_factory=list)
    meals: List[Meal] = Field(default_factory=list)
