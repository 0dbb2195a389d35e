from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from core.domain.entities.block_entity import BlockHeader, StorageSnapshot


class ChainStateRepository(ABC):
    """
    Abstraction over the authoritative on-chain state reader.

    Values are returned in the already-parsed (substrate JSON) shape of the
    block's runtime; decoding to domain types is done by the storage decoders.
    """

    @abstractmethod
    async def get_storage(self, *, name: str, key: Any, block: BlockHeader) -> StorageSnapshot:
        """
        Read storage item `name` (e.g. "DexStable.Pools") at `key` as of `block`.
        """
        raise NotImplementedError
