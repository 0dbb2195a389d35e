"""
Decoding rules for the chain storage items read by the lookup caches.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict

from core.services.versioned_decoder import VersionedDecoderRegistry

V1021000 = 1021000

STABLE_POOLS = "DexStable.Pools"
PAIR_STATUSES = "DexGeneral.PairStatuses"

BASE_POOL = "Base"
META_POOL = "Meta"
TRADING = "Trading"

storage_decoders: VersionedDecoderRegistry[Any] = VersionedDecoderRegistry("storage")


class StablePoolDecoded(BaseModel):
    """
    Stable pool definition. currency_ids keep the raw chain encoding.

    kind is passed through as-is so the caller can reject pool types it does not know.
    """

    kind: str
    currency_ids: List[Any] = []
    fee: Optional[int] = None

    model_config = ConfigDict(frozen=True)


class PairStatusDecoded(BaseModel):
    kind: str
    fee_rate: Optional[int] = None  # basis points, only while trading

    model_config = ConfigDict(frozen=True)


@storage_decoders.register(STABLE_POOLS, since=V1021000)
def _stable_pool_v1021000(raw: Any) -> StablePoolDecoded:
    kind = str(raw["__kind"])
    value = raw.get("value") or {}
    if kind == BASE_POOL:
        return StablePoolDecoded(kind=kind, currency_ids=list(value["currencyIds"]), fee=value.get("fee"))
    if kind == META_POOL:
        info = value["info"]
        return StablePoolDecoded(kind=kind, currency_ids=list(info["currencyIds"]), fee=info.get("fee"))
    return StablePoolDecoded(kind=kind)


@storage_decoders.register(PAIR_STATUSES, since=V1021000)
def _pair_status_v1021000(raw: Any) -> PairStatusDecoded:
    kind = str(raw["__kind"])
    if kind == TRADING:
        return PairStatusDecoded(kind=kind, fee_rate=int(raw["value"]["feeRate"]))
    return PairStatusDecoded(kind=kind)
