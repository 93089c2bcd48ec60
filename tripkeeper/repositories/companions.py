"""
Companion repository
"""

from tripkeeper.models.entities import Companion

from .base import BaseRepository


class CompanionRepository(BaseRepository[Companion]):
    """Travel companions

    Deleting a companion leaves documents that point at it in place; the
    documents then show the generic owner label.
    """

    model = Companion
