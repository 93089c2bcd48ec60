"""
Relation manager
Resolves cross-collection references and builds the per-day groupings

References are plain id strings with no schema behind them. A reference that
resolves to nothing is never an error here: resolvers return None and display
helpers return a fallback label. Deleting a trip, day or companion does not
touch records that point at it; find_dangling_references() lists them.
"""

from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from tripkeeper.core import collection_store as collections
from tripkeeper.core.db import TravelDatabase
from tripkeeper.core.logger import get_logger
from tripkeeper.models.entities import (
    Accommodation,
    Companion,
    ItineraryDay,
    Meal,
    OwnerType,
    PersonalDocument,
    Transportation,
    Trip,
)
from tripkeeper.models.results import DanglingReference, DayGroup, DayOverview

logger = get_logger(__name__)

UNKNOWN_TRIP = "unknown trip"
COMPANION_FALLBACK = "companion"
PRIMARY_OWNER = "primary"

C = TypeVar("C")


def split_by_day(
    records: Sequence[C],
    days: Sequence[ItineraryDay],
    sort_key: Optional[Callable[[C], object]] = None,
) -> Tuple[List[DayGroup], List[C]]:
    """Group child records under their itinerary day

    Records whose itinerary_day_id is empty or is not one of the given days go
    to the unassigned list, so every record lands in exactly one place.
    """
    by_day: Dict[str, List[C]] = {day.id: [] for day in days}
    unassigned: List[C] = []

    for record in records:
        day_id = getattr(record, "itinerary_day_id", None)
        if day_id and day_id in by_day:
            by_day[day_id].append(record)
        else:
            unassigned.append(record)

    if sort_key is not None:
        unassigned.sort(key=sort_key)

    groups = [
        DayGroup(
            day=day,
            items=sorted(by_day[day.id], key=sort_key) if sort_key else by_day[day.id],
        )
        for day in days
    ]
    return groups, unassigned


class RelationManager:
    """Reference resolution and joins over a TravelDatabase"""

    def __init__(self, db: TravelDatabase):
        self.db = db

    # ---------- resolvers ----------

    def resolve_trip(self, trip_id: Optional[str]) -> Optional[Trip]:
        return self.db.trips.get_by_id(trip_id) if trip_id else None

    def resolve_day(self, day_id: Optional[str]) -> Optional[ItineraryDay]:
        return self.db.itinerary.get_by_id(day_id) if day_id else None

    def resolve_companion(self, companion_id: Optional[str]) -> Optional[Companion]:
        return self.db.companions.get_by_id(companion_id) if companion_id else None

    def resolve_accommodation(self, accommodation_id: Optional[str]) -> Optional[Accommodation]:
        return self.db.accommodations.get_by_id(accommodation_id) if accommodation_id else None

    def trip_title(self, trip_id: Optional[str]) -> str:
        trip = self.resolve_trip(trip_id)
        return trip.title if trip else UNKNOWN_TRIP

    def document_owner_name(self, document: PersonalDocument) -> str:
        """Display name of a document's owner"""
        if document.owner_type != OwnerType.COMPANION:
            return PRIMARY_OWNER

        companion = self.resolve_companion(document.owner_id)
        if companion is None:
            logger.debug(f"Document {document.id} points at missing companion {document.owner_id}")
            return COMPANION_FALLBACK
        return companion.name

    # ---------- per-day views ----------

    def group_meals_by_day(self, trip_id: str) -> Tuple[List[DayGroup], List[Meal]]:
        """Meals of a trip under their days, plus the unassigned ones"""
        return split_by_day(
            self.db.meals.filter(trip_id=trip_id),
            self.db.itinerary.list_for_trip(trip_id),
            sort_key=lambda meal: meal.reservation_time,
        )

    def unassigned_meals(self, trip_id: str) -> List[Meal]:
        return self.group_meals_by_day(trip_id)[1]

    def group_transportations_by_day(
        self, trip_id: str
    ) -> Tuple[List[DayGroup], List[Transportation]]:
        return split_by_day(
            self.db.transportations.filter(trip_id=trip_id),
            self.db.itinerary.list_for_trip(trip_id),
            sort_key=lambda leg: leg.departure_date_time,
        )

    def group_accommodations_by_day(
        self, trip_id: str
    ) -> Tuple[List[DayGroup], List[Accommodation]]:
        return split_by_day(
            self.db.accommodations.filter(trip_id=trip_id),
            self.db.itinerary.list_for_trip(trip_id),
            sort_key=lambda item: (item.check_in_date, item.check_in_time),
        )

    def day_overview(self, day_id: str) -> Optional[DayOverview]:
        """A day with its trip, accommodation, legs and meals resolved"""
        day = self.resolve_day(day_id)
        if day is None:
            return None

        transportation_ids = set(day.transportation_ids)
        meal_ids = set(day.meal_ids)
        return DayOverview(
            day=day,
            trip=self.resolve_trip(day.trip_id),
            accommodation=self.resolve_accommodation(day.accommodation_id),
            transportations=[
                leg for leg in self.db.transportations.list() if leg.id in transportation_ids
            ],
            meals=[meal for meal in self.db.meals.list() if meal.id in meal_ids],
        )

    # ---------- integrity ----------

    def find_dangling_references(self) -> List[DanglingReference]:
        """Every stored reference whose target is missing"""
        trip_ids = {trip.id for trip in self.db.trips.list()}
        days = self.db.itinerary.list()
        day_ids = {day.id for day in days}
        accommodation_ids = {item.id for item in self.db.accommodations.list()}
        transportations = self.db.transportations.list()
        transportation_ids = {leg.id for leg in transportations}
        meals = self.db.meals.list()
        meal_ids = {meal.id for meal in meals}
        companion_ids = {companion.id for companion in self.db.companions.list()}

        found: List[DanglingReference] = []

        def check(collection: str, record_id: str, field: str, target: Optional[str], known):
            if target and target not in known:
                found.append(
                    DanglingReference(
                        collection=collection, record_id=record_id, field=field, missing_id=target
                    )
                )

        for day in days:
            check(collections.ITINERARY, day.id, "tripId", day.trip_id, trip_ids)
            check(collections.ITINERARY, day.id, "accommodationId", day.accommodation_id, accommodation_ids)
            for leg_id in day.transportation_ids:
                check(collections.ITINERARY, day.id, "transportationIds", leg_id, transportation_ids)
            for meal_id in day.meal_ids:
                check(collections.ITINERARY, day.id, "mealIds", meal_id, meal_ids)

        for leg in transportations:
            check(collections.TRANSPORTATIONS, leg.id, "tripId", leg.trip_id, trip_ids)
            check(collections.TRANSPORTATIONS, leg.id, "itineraryDayId", leg.itinerary_day_id, day_ids)

        for meal in meals:
            check(collections.MEALS, meal.id, "tripId", meal.trip_id, trip_ids)
            check(collections.MEALS, meal.id, "itineraryDayId", meal.itinerary_day_id, day_ids)

        for item in self.db.accommodations.list():
            check(collections.ACCOMMODATIONS, item.id, "itineraryDayId", item.itinerary_day_id, day_ids)

        for document in self.db.documents.list():
            if document.owner_type == OwnerType.COMPANION:
                check(collections.PERSONAL_DOCUMENTS, document.id, "ownerId", document.owner_id, companion_ids)

        for visa in self.db.visas.list():
            check(collections.TRAVEL_VISAS, visa.id, "tripId", visa.trip_id, trip_ids)

        if found:
            logger.info(f"Found {len(found)} dangling references")
        return found
