# core/domain/entities/loan_entity.py
from __future__ import annotations

from typing import Optional

from core.domain.entities.base_entity import IndexedEntity
from core.domain.entities.block_entity import Height
from core.domain.entities.currency_entity import Currency
from core.domain.entities.decoded_event_entity import RateModel
from core.domain.enums.market_enums import MarketState


class LoanMarketActivation(IndexedEntity):
    """
    Activation of a lending market. Shares its id with the market.
    """

    market_id: str
    token: Currency
    height: Height
    timestamp: int


class LoanMarket(IndexedEntity):
    """
    A lending market, keyed by `loanMarket_<underlying currency key>`.

    New/updated/activated events rewrite the same record instead of creating a new one.
    """

    token: Currency
    height: Height
    timestamp: int

    borrow_cap: int
    supply_cap: int
    rate_model: RateModel
    close_factor: int
    lend_token_id: int
    state: MarketState
    reserve_factor: int
    collateral_factor: int
    liquidate_incentive: int
    liquidation_threshold: int
    liquidate_incentive_reserved_factor: int

    activation: Optional[LoanMarketActivation] = None


class Loan(IndexedEntity):
    height: Height
    timestamp: int
    user_parachain_address: str
    token: Currency
    amount_borrowed: Optional[int] = None
    amount_repaid: Optional[int] = None
    comment: Optional[str] = None


class Deposit(IndexedEntity):
    height: Height
    timestamp: int
    user_parachain_address: str
    token: Currency
    amount_deposited: Optional[int] = None
    amount_withdrawn: Optional[int] = None
    comment: Optional[str] = None


class InterestAccrual(IndexedEntity):
    height: Height
    timestamp: int
    underlying_currency: Currency
    currency_symbol: str
    total_borrows: int
    total_reserves: int
    borrow_index: int
    utilization_ratio: int
    borrow_rate: int
    supply_rate: int
    exchange_rate: int
    exchange_rate_float: float
    comment: Optional[str] = None
