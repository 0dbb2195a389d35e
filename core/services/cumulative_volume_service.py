from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, Field

from core.domain.entities.dex_entity import (
    CumulativeDexTradeCount,
    CumulativeDexTradeCountPerAccount,
    CumulativeDexTradingVolume,
    CumulativeDexTradingVolumePerAccount,
    CumulativeDexTradingVolumePerPool,
    CumulativeEntity,
    PooledAmount,
)
from core.domain.enums.market_enums import PoolType
from core.repositories.entity_repository import EntityRepository
from core.services.currency_codec_service import CurrencyCodecService
from core.services.entity_buffer_service import EntityBuffer

C = TypeVar("C", bound=CumulativeEntity)

TOTAL_SCOPE = "total"


class PoolVolumeDelta(BaseModel):
    """
    Contribution of one swap leg to a pool's running volume.
    """

    pool_type: PoolType
    pool_id: str
    amounts: List[PooledAmount]
    fees: List[PooledAmount] = Field(default_factory=list)


def pool_scope_key(pool_type: PoolType, pool_id: str) -> str:
    return f"{PoolType(pool_type).value.lower()}:{pool_id}"


def account_scope_key(account_id: str) -> str:
    return f"account:{account_id}"


def snapshot_id(scope_key: str, till_timestamp: int) -> str:
    return f"{scope_key}@{int(till_timestamp)}"


def merge_amounts(existing: Sequence[PooledAmount], delta: Sequence[PooledAmount]) -> List[PooledAmount]:
    """
    Add `delta` into `existing`, matching entries by canonical currency key.
    New currencies are appended in the order they are first seen.
    """
    merged: Dict[str, PooledAmount] = {}
    for item in list(existing) + list(delta):
        key = CurrencyCodecService.to_string(item.token)
        prev = merged.get(key)
        merged[key] = PooledAmount(token=item.token, amount=item.amount + (prev.amount if prev else 0))
    return list(merged.values())


class CumulativeVolumeService:
    """
    Running DEX totals at pool, account and global scope.

    Every update reads the latest snapshot of its scope (staged in this batch,
    else persisted) and stages previous + delta under `<scope>@<till_timestamp>`.
    Snapshots of the same block timestamp coalesce in the buffer. Callers must
    await updates one after another: a later read in the same batch has to see
    the earlier write.
    """

    def __init__(
        self,
        *,
        buffer: EntityBuffer,
        entity_repository: EntityRepository,
        logger: logging.Logger | None = None,
    ) -> None:
        self._buffer = buffer
        self._repo = entity_repository
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    async def latest(self, entity_type: Type[C], scope_key: str, till_timestamp: int) -> Optional[C]:
        staged = self._buffer.find_latest(
            entity_type,
            lambda e: e.scope_key == scope_key and e.till_timestamp <= till_timestamp,
            key=lambda e: e.till_timestamp,
        )
        if staged is not None:
            return staged
        return await self._repo.get_latest_cumulative(entity_type, scope_key, till_timestamp)

    async def _update_volume(
        self,
        entity_type: Type[C],
        *,
        scope_key: str,
        till_timestamp: int,
        amounts: Sequence[PooledAmount],
        fees: Sequence[PooledAmount],
        fields: Dict[str, Any],
    ) -> C:
        previous = await self.latest(entity_type, scope_key, till_timestamp)
        entity = entity_type(
            id=snapshot_id(scope_key, till_timestamp),
            scope_key=scope_key,
            till_timestamp=int(till_timestamp),
            amounts=merge_amounts(previous.amounts if previous else [], amounts),
            fees=merge_amounts(previous.fees if previous else [], fees),
            **fields,
        )
        self._buffer.push_entity(entity)
        return entity

    async def _update_count(
        self,
        entity_type: Type[C],
        *,
        scope_key: str,
        till_timestamp: int,
        fields: Dict[str, Any],
    ) -> C:
        previous = await self.latest(entity_type, scope_key, till_timestamp)
        entity = entity_type(
            id=snapshot_id(scope_key, till_timestamp),
            scope_key=scope_key,
            till_timestamp=int(till_timestamp),
            count=(previous.count if previous else 0) + 1,
            **fields,
        )
        self._buffer.push_entity(entity)
        return entity

    async def update_pool_volume(self, delta: PoolVolumeDelta, till_timestamp: int) -> CumulativeDexTradingVolumePerPool:
        return await self._update_volume(
            CumulativeDexTradingVolumePerPool,
            scope_key=pool_scope_key(delta.pool_type, delta.pool_id),
            till_timestamp=till_timestamp,
            amounts=delta.amounts,
            fees=delta.fees,
            fields={"pool_id": delta.pool_id, "pool_type": delta.pool_type},
        )

    async def update_account_volume(
        self,
        account_id: str,
        till_timestamp: int,
        amounts: Sequence[PooledAmount],
        fees: Sequence[PooledAmount] = (),
    ) -> CumulativeDexTradingVolumePerAccount:
        return await self._update_volume(
            CumulativeDexTradingVolumePerAccount,
            scope_key=account_scope_key(account_id),
            till_timestamp=till_timestamp,
            amounts=amounts,
            fees=fees,
            fields={"account_id": account_id},
        )

    async def update_account_trade_count(self, account_id: str, till_timestamp: int) -> CumulativeDexTradeCountPerAccount:
        return await self._update_count(
            CumulativeDexTradeCountPerAccount,
            scope_key=account_scope_key(account_id),
            till_timestamp=till_timestamp,
            fields={"account_id": account_id},
        )

    async def update_total_volume(
        self,
        till_timestamp: int,
        amounts: Sequence[PooledAmount],
        fees: Sequence[PooledAmount] = (),
    ) -> CumulativeDexTradingVolume:
        return await self._update_volume(
            CumulativeDexTradingVolume,
            scope_key=TOTAL_SCOPE,
            till_timestamp=till_timestamp,
            amounts=amounts,
            fees=fees,
            fields={},
        )

    async def update_total_trade_count(self, till_timestamp: int) -> CumulativeDexTradeCount:
        return await self._update_count(
            CumulativeDexTradeCount,
            scope_key=TOTAL_SCOPE,
            till_timestamp=till_timestamp,
            fields={},
        )

    async def fold_swap(
        self,
        *,
        account_id: str,
        till_timestamp: int,
        pool_deltas: Sequence[PoolVolumeDelta],
        amounts: Sequence[PooledAmount],
        fees: Sequence[PooledAmount] = (),
    ) -> None:
        """
        Fold one swap event into every scope, in fixed order:
        pools (leg by leg), then the account, then the global totals.
        """
        for delta in pool_deltas:
            await self.update_pool_volume(delta, till_timestamp)

        await self.update_account_volume(account_id, till_timestamp, amounts, fees)
        await self.update_account_trade_count(account_id, till_timestamp)

        await self.update_total_volume(till_timestamp, amounts, fees)
        await self.update_total_trade_count(till_timestamp)
