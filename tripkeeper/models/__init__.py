"""
Data models for the stored collections
"""

from .base import BaseModel, Record
from .entities import (
    DEFAULT_ALBUM_COVER,
    VIDEO_THUMBNAIL,
    Accommodation,
    Activity,
    Album,
    BookingStatus,
    Companion,
    DietaryOptions,
    DocumentType,
    FlightDetails,
    ItineraryDay,
    Meal,
    MealType,
    Media,
    MediaType,
    OwnerType,
    PersonalDocument,
    Transportation,
    TransportationStatus,
    TransportationType,
    TravelVisa,
    Trip,
    TripStatus,
    VisaStatus,
)
from .results import (
    DanglingReference,
    DayGroup,
    DayOverview,
    ProcessedMedia,
    UploadFailure,
    UploadReport,
)

__all__ = [
    # Base
    "BaseModel",
    "Record",
    # Entities
    "Trip",
    "TripStatus",
    "ItineraryDay",
    "Activity",
    "Accommodation",
    "Transportation",
    "TransportationType",
    "TransportationStatus",
    "FlightDetails",
    "Meal",
    "MealType",
    "DietaryOptions",
    "BookingStatus",
    "Companion",
    "PersonalDocument",
    "DocumentType",
    "OwnerType",
    "TravelVisa",
    "VisaStatus",
    "Album",
    "Media",
    "MediaType",
    "DEFAULT_ALBUM_COVER",
    "VIDEO_THUMBNAIL",
    # Results
    "ProcessedMedia",
    "UploadFailure",
    "UploadReport",
    "DanglingReference",
    "DayGroup",
    "DayOverview",
]
