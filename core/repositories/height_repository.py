from __future__ import annotations

from abc import ABC, abstractmethod

from core.domain.entities.block_entity import Height


class HeightRepository(ABC):
    """
    Abstraction over the external height bookkeeping.
    """

    @abstractmethod
    async def resolve(self, absolute_height: int) -> Height:
        """
        Translate a raw block height into the denormalized Height of emitted records.
        """
        raise NotImplementedError


class AbsoluteHeightRepository(HeightRepository):
    """
    Treats every block as active. Used when no height bookkeeping is wired in.
    """

    async def resolve(self, absolute_height: int) -> Height:
        return Height(absolute=int(absolute_height), active=int(absolute_height))
