# core/domain/entities/dex_entity.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from core.domain.entities.base_entity import IndexedEntity
from core.domain.entities.block_entity import Height
from core.domain.entities.currency_entity import Currency
from core.domain.enums.market_enums import PoolType


class PooledAmount(BaseModel):
    token: Currency
    amount: int


class SwapLeg(BaseModel):
    """
    One side of a swap: the currency, its atomic amount and the owning account.
    """

    currency: Currency
    atomic_amount: int
    account_id: Optional[str] = None
    raw_currency_id: Any = None


class SwapDetails(BaseModel):
    from_leg: SwapLeg
    to_leg: SwapLeg


class Swap(IndexedEntity):
    height: Height
    timestamp: int
    pool_type: PoolType
    pool_id: str
    from_account: str
    to_account: str
    from_amount: PooledAmount
    to_amount: PooledAmount
    fees: PooledAmount
    fee_rate: Decimal


class CumulativeEntity(IndexedEntity):
    """
    Running total snapshot for one scope.

    id is `<scope_key>@<till_timestamp>`; every update writes a new snapshot
    (or replaces the one of the same block timestamp) holding previous total + delta.
    """

    scope_key: str
    till_timestamp: int


class CumulativeVolumeEntity(CumulativeEntity):
    amounts: List[PooledAmount] = Field(default_factory=list)
    fees: List[PooledAmount] = Field(default_factory=list)


class CumulativeDexTradingVolume(CumulativeVolumeEntity):
    pass


class CumulativeDexTradingVolumePerAccount(CumulativeVolumeEntity):
    account_id: str


class CumulativeDexTradingVolumePerPool(CumulativeVolumeEntity):
    pool_id: str
    pool_type: PoolType


class CumulativeDexTradeCount(CumulativeEntity):
    count: int = 0


class CumulativeDexTradeCountPerAccount(CumulativeEntity):
    account_id: str
    count: int = 0
