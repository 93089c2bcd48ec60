"""
Itinerary repository - days of a trip with their embedded activities
"""

from typing import Any, Dict, List, Optional, Union

from tripkeeper.core.logger import get_logger
from tripkeeper.models.entities import Activity, ItineraryDay

from .base import BaseRepository, new_id

logger = get_logger(__name__)


class ItineraryRepository(BaseRepository[ItineraryDay]):
    model = ItineraryDay

    def list_for_trip(self, trip_id: str) -> List[ItineraryDay]:
        """Days of a trip ordered by day number"""
        return sorted(self.filter(trip_id=trip_id), key=lambda day: (day.day_number, day.date))

    def add_activity(
        self, day_id: str, activity: Union[Dict[str, Any], Activity]
    ) -> Optional[ItineraryDay]:
        """Append an activity to a day, assigning it an id

        Returns the updated day, or None when the day does not exist.
        """
        day = self.get_by_id(day_id)
        if day is None:
            logger.warning(f"Cannot add activity to missing itinerary day {day_id}")
            return None

        data = activity.model_dump() if isinstance(activity, Activity) else dict(activity)
        data["id"] = data.get("id") or new_id()
        activities = day.activities + [Activity.model_validate(data)]
        return self.update(day.model_copy(update={"activities": activities}))

    def remove_activity(self, day_id: str, activity_id: str) -> Optional[ItineraryDay]:
        day = self.get_by_id(day_id)
        if day is None:
            return None

        activities = [a for a in day.activities if a.id != activity_id]
        if len(activities) == len(day.activities):
            return day
        return self.update(day.model_copy(update={"activities": activities}))
