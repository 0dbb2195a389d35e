from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator

from core.domain.entities.block_entity import BlockHeader


class BlockSourceRepository(ABC):
    """
    Abstraction over the block/event feed (archive node, squid processor, fixtures).

    Blocks are yielded in height order with their events already parsed.
    """

    @abstractmethod
    def blocks(self) -> AsyncIterator[BlockHeader]:
        """
        Iterate blocks in height order until the source is exhausted or closed.
        """
        raise NotImplementedError
