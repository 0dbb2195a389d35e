from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence, Type, TypeVar

from core.domain.entities.base_entity import IndexedEntity
from core.domain.entities.dex_entity import CumulativeEntity
from core.domain.entities.loan_entity import LoanMarket

E = TypeVar("E", bound=IndexedEntity)
C = TypeVar("C", bound=CumulativeEntity)


class EntityRepository(ABC):
    """
    Abstraction over persisted records (previous flushes).

    The engine only reads through this port; writes go through `upsert_many`
    when a batch is flushed.
    """

    @abstractmethod
    async def get_by_id(self, entity_type: Type[E], entity_id: str) -> Optional[E]:
        raise NotImplementedError

    @abstractmethod
    async def get_latest_cumulative(
        self,
        entity_type: Type[C],
        scope_key: str,
        till_timestamp: int,
    ) -> Optional[C]:
        """
        Latest snapshot of a scope with till_timestamp <= the given one.
        """
        raise NotImplementedError

    @abstractmethod
    async def find_market_by_lend_token(self, lend_token_id: int) -> Optional[LoanMarket]:
        raise NotImplementedError

    @abstractmethod
    async def upsert_many(self, kind: str, entities: Sequence[IndexedEntity]) -> int:
        """
        Persist a flushed batch of one kind. Returns the number of written records.
        """
        raise NotImplementedError
