"""
Entity repositories - one per stored collection
"""

from .accommodations import AccommodationRepository
from .albums import AlbumRepository, MediaRepository
from .base import BaseRepository, DanglingReferenceError, StorageWriteError
from .companions import CompanionRepository
from .documents import PersonalDocumentRepository, TravelVisaRepository
from .itinerary import ItineraryRepository
from .meals import MealRepository
from .transportations import TransportationRepository
from .trips import TripRepository

__all__ = [
    "BaseRepository",
    "StorageWriteError",
    "DanglingReferenceError",
    "TripRepository",
    "ItineraryRepository",
    "AccommodationRepository",
    "TransportationRepository",
    "MealRepository",
    "CompanionRepository",
    "PersonalDocumentRepository",
    "TravelVisaRepository",
    "AlbumRepository",
    "MediaRepository",
]
