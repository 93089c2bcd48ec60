"""
Meal repository
"""

from typing import List

from tripkeeper.models.entities import Meal

from .base import BaseRepository


class MealRepository(BaseRepository[Meal]):
    model = Meal

    def list_for_trip(self, trip_id: str) -> List[Meal]:
        """Meals of a trip ordered by reservation time"""
        return sorted(self.filter(trip_id=trip_id), key=lambda meal: meal.reservation_time)
