# core/domain/entities/decoded_event_entity.py
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict

from core.domain.entities.currency_entity import Currency
from core.domain.enums.market_enums import MarketState, RateModelKind


class _Decoded(BaseModel):
    """
    Version-independent record produced by a decoding rule.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class RateModel(_Decoded):
    kind: RateModelKind
    base_rate: int
    jump_rate: Optional[int] = None
    full_rate: Optional[int] = None
    jump_utilization: Optional[int] = None


class MarketParams(_Decoded):
    collateral_factor: int
    liquidation_threshold: int
    reserve_factor: int
    close_factor: int
    liquidate_incentive: int
    liquidate_incentive_reserved_factor: int = 0
    rate_model: RateModel
    state: MarketState = MarketState.PENDING
    supply_cap: int
    borrow_cap: int
    lend_token_id: int


class MarketDecoded(_Decoded):
    underlying: Currency
    market: MarketParams


class MarketActivationDecoded(_Decoded):
    underlying: Currency


class LoanAmountDecoded(_Decoded):
    """
    Borrowed, repaid, deposited, redeemed and collateral deposit/withdraw events.
    """

    account_id: str
    currency: Currency
    amount: int


class InterestAccruedDecoded(_Decoded):
    underlying: Currency
    total_borrows: int
    total_reserves: int
    borrow_index: int
    utilization_ratio: int
    borrow_rate: int
    supply_rate: int
    exchange_rate: int


class AssetSwapDecoded(_Decoded):
    """
    Multi-hop swap through standard pools.

    raw_path keeps the chain encoding of every currency, needed for storage keys.
    """

    account_id: str
    recipient: str
    path: List[Currency]
    raw_path: List[Any]
    balances: List[int]


class StableExchangeDecoded(_Decoded):
    account_id: str
    pool_id: int
    in_index: int
    in_amount: int
    out_index: int
    out_amount: int
