"""
Transportation repository
"""

from typing import List

from tripkeeper.models.entities import Transportation, TransportationType

from .base import BaseRepository


class TransportationRepository(BaseRepository[Transportation]):
    model = Transportation

    def list_for_trip(self, trip_id: str) -> List[Transportation]:
        """Legs of a trip ordered by departure time"""
        return sorted(
            self.filter(trip_id=trip_id),
            key=lambda leg: leg.departure_date_time,
        )

    def list_by_type(self, transportation_type: TransportationType) -> List[Transportation]:
        return self.filter(type=transportation_type)
