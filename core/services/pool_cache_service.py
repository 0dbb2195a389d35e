from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict

from core.domain.entities.block_entity import BlockHeader
from core.domain.entities.currency_entity import Currency
from core.domain.exceptions import (
    AssetIndexOutOfRange,
    PoolNotFound,
    PoolTypeUnsupported,
    StorageVersionUnsupported,
)
from core.repositories.chain_state_repository import ChainStateRepository
from core.services.currency_codec_service import CurrencyCodecService
from core.services.storage_decoder_service import (
    BASE_POOL,
    META_POOL,
    STABLE_POOLS,
    StablePoolDecoded,
    storage_decoders,
)

# Stable swap fees are stored with 10 decimals
STABLE_FEE_DENOMINATOR = Decimal(10) ** 10


class PoolMember(BaseModel):
    currency: Currency
    raw_currency_id: Any

    model_config = ConfigDict(frozen=True)


class StablePoolInfo(BaseModel):
    pool_id: int
    members: List[PoolMember]
    fee_rate: Decimal = Decimal(0)

    model_config = ConfigDict(frozen=True)


class StablePoolCache:
    """
    Stable pool id -> ordered member currencies (and fee rate).

    Definitions are fetched from chain state on first use and kept for the rest
    of the run. A lookup past the cached members re-reads storage once, since
    pools can gain currencies.
    """

    def __init__(self, *, chain_state: ChainStateRepository, logger: logging.Logger | None = None) -> None:
        self._chain_state = chain_state
        self._pools: Dict[int, StablePoolInfo] = {}
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    async def get_currency_by_index(self, *, pool_id: int, index: int, block: BlockHeader) -> PoolMember:
        """
        Member `index` of stable pool `pool_id`.

        Raises:
            PoolNotFound: storage has no pool with this id.
            PoolTypeUnsupported: the pool is neither a base nor a meta pool.
            StorageVersionUnsupported: pool storage cannot be read at this runtime.
            AssetIndexOutOfRange: index is past the members even after a refresh.
        """
        cached = self._pools.get(pool_id)
        if cached is not None and len(cached.members) > index:
            return cached.members[index]

        info = await self.refresh(pool_id=pool_id, block=block)
        if len(info.members) > index:
            return info.members[index]

        raise AssetIndexOutOfRange(pool_id, index, len(info.members))

    async def get_pool(self, *, pool_id: int, block: BlockHeader) -> StablePoolInfo:
        cached = self._pools.get(pool_id)
        if cached is not None:
            return cached
        return await self.refresh(pool_id=pool_id, block=block)

    async def refresh(self, *, pool_id: int, block: BlockHeader) -> StablePoolInfo:
        """
        Read the pool definition from chain state and cache it.
        """
        snapshot = await self._chain_state.get_storage(name=STABLE_POOLS, key=pool_id, block=block)
        if not snapshot.is_defined:
            raise StorageVersionUnsupported(f"{STABLE_POOLS} storage is not defined for spec_version={snapshot.spec_version}")
        if snapshot.value is None:
            raise PoolNotFound(pool_id)

        pool = storage_decoders.decode(STABLE_POOLS, snapshot.spec_version, snapshot.value)
        if pool is None:
            raise StorageVersionUnsupported(f"Unknown {STABLE_POOLS} storage version {snapshot.spec_version}")

        info = self._to_info(pool_id, pool)
        self._pools[pool_id] = info
        self._logger.debug("Cached stable pool pool_id=%s members=%s", pool_id, len(info.members))
        return info

    @staticmethod
    def _to_info(pool_id: int, pool: StablePoolDecoded) -> StablePoolInfo:
        if pool.kind not in (BASE_POOL, META_POOL):
            raise PoolTypeUnsupported(pool_id, pool.kind)

        members = [
            PoolMember(currency=CurrencyCodecService.decode_currency_id(raw), raw_currency_id=raw)
            for raw in pool.currency_ids
        ]
        fee_rate = Decimal(pool.fee or 0) / STABLE_FEE_DENOMINATOR
        return StablePoolInfo(pool_id=pool_id, members=members, fee_rate=fee_rate)

    def reset(self) -> None:
        self._pools.clear()

    def __contains__(self, pool_id: object) -> bool:
        return pool_id in self._pools
