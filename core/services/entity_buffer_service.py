from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple, Type, TypeVar

from core.domain.entities.base_entity import IndexedEntity

E = TypeVar("E", bound=IndexedEntity)


class EntityBuffer:
    """
    Staging map of records produced during one processing batch.

    Records are keyed by (kind, id): pushing a record whose key is already staged
    replaces it, so in-batch reads always see the value that will be persisted.
    Insertion order of first push is kept per kind.
    """

    def __init__(self) -> None:
        self._entities: Dict[str, Dict[str, IndexedEntity]] = {}

    def push(self, kind: str, entity: IndexedEntity) -> None:
        self._entities.setdefault(kind, {})[entity.id] = entity

    def push_entity(self, entity: IndexedEntity) -> None:
        self.push(entity.kind(), entity)

    def get(self, entity_type: Type[E], entity_id: str) -> Optional[E]:
        entity = self._entities.get(entity_type.kind(), {}).get(entity_id)
        return entity  # type: ignore[return-value]

    def items(self, entity_type: Type[E]) -> List[E]:
        return list(self._entities.get(entity_type.kind(), {}).values())  # type: ignore[arg-type]

    def find_latest(
        self,
        entity_type: Type[E],
        predicate: Callable[[E], bool],
        key: Callable[[E], int],
    ) -> Optional[E]:
        """
        Highest-`key` staged record of a kind matching `predicate`.
        """
        matching = [e for e in self.items(entity_type) if predicate(e)]
        if not matching:
            return None
        return max(matching, key=key)

    def pending(self) -> Dict[str, List[IndexedEntity]]:
        """
        All staged records grouped by kind. The buffer is left as is; callers
        clear it once the records are persisted.
        """
        return {kind: list(entities.values()) for kind, entities in self._entities.items() if entities}

    def keys(self) -> List[Tuple[str, str]]:
        return [(kind, entity_id) for kind, entities in self._entities.items() for entity_id in entities]

    def clear(self) -> None:
        self._entities = {}

    def __len__(self) -> int:
        return sum(len(entities) for entities in self._entities.values())
