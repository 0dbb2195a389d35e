# core/domain/entities/base_entity.py
from __future__ import annotations

from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict

E = TypeVar("E", bound="IndexedEntity")

# BSON integers are signed 64-bit
_BSON_INT_MAX = 2**63 - 1


def _bsonify(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and abs(value) > _BSON_INT_MAX:
        return str(value)
    if isinstance(value, dict):
        return {k: _bsonify(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_bsonify(v) for v in value]
    return value


class IndexedEntity(BaseModel):
    """
    Base entity for every record emitted by the indexer.

    - `id` is the logical record key; it maps to Mongo's `_id`.
    - The record kind (collection) is the concrete class name.
    - Atomic amounts are plain ints; values beyond int64 are stored as strings
      and coerced back to int on load.
    """

    id: str

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        use_enum_values=True,
    )

    @classmethod
    def kind(cls) -> str:
        return cls.__name__

    @classmethod
    def from_mongo(cls: Type[E], doc: Optional[dict[str, Any]]) -> Optional[E]:
        """
        Convert a MongoDB document into a strongly-typed entity.

        Args:
            doc: Raw MongoDB dict (may include `_id`).

        Returns:
            An entity instance or None if doc is falsy.
        """
        if not doc:
            return None
        data = dict(doc)
        if "_id" in data:
            data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)

    def to_mongo(self) -> dict[str, Any]:
        """
        Convert this entity into a MongoDB document dict (`id` -> `_id`).
        """
        data = _bsonify(self.model_dump(mode="json", exclude_none=True))
        data["_id"] = data.pop("id")
        return data
