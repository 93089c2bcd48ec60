"""
Base model configuration
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel as PydanticBaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseModel(PydanticBaseModel):
    """Base model with camelCase conversion for the stored JSON.

    This base model configuration:
    - Reads and writes camelCase keys for snake_case python fields
    - Keeps undeclared keys so rewriting a record never drops data
    """

    model_config = ConfigDict(
        # Stored records use camelCase keys (tripId, createdAt, ...).
        #
        # See: <https://docs.pydantic.dev/2.10/concepts/alias/#using-an-aliasgenerator>
        alias_generator=to_camel,
        # Allow populating by both field name and alias
        populate_by_name=True,
        # Records written by older clients may carry fields this model does not declare.
        #
        # See: <https://docs.pydantic.dev/2.10/concepts/models/#extra-data>
        extra="allow",
        # Enum fields hold their string values, matching the stored JSON
        use_enum_values=True,
        validate_assignment=True,
    )

    def model_dump(self, **kwargs):
        """Override model_dump to always use aliases (camelCase) by default."""
        kwargs.setdefault("by_alias", True)
        return super().model_dump(**kwargs)

    def to_record(self) -> dict:
        """JSON-ready dict in the stored layout"""
        return self.model_dump(mode="json", exclude_none=True)


class Record(BaseModel):
    """Persisted entity: client-side id plus write timestamps"""

    id: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
