"""
Trip repository
"""

from typing import List, Optional

from tripkeeper.core.logger import get_logger
from tripkeeper.models.entities import Trip, TripStatus

from .base import BaseRepository

logger = get_logger(__name__)


class TripRepository(BaseRepository[Trip]):
    model = Trip

    def list_by_status(self, status: Optional[TripStatus] = None) -> List[Trip]:
        """Trips with the given status (all when None), latest start date first"""
        trips = self.list()
        if status is not None:
            trips = [trip for trip in trips if trip.status == status]
        return sorted(trips, key=lambda trip: trip.start_date, reverse=True)
