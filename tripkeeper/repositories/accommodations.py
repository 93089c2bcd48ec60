"""
Accommodation repository
"""

from typing import List

from tripkeeper.models.entities import Accommodation

from .base import BaseRepository


class AccommodationRepository(BaseRepository[Accommodation]):
    model = Accommodation

    def list_for_trip(self, trip_id: str) -> List[Accommodation]:
        """Accommodation of a trip ordered by check-in date"""
        return sorted(
            self.filter(trip_id=trip_id),
            key=lambda item: (item.check_in_date, item.check_in_time),
        )
