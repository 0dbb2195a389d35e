"""
Decoding rules for every indexed event, per runtime spec version.

Runtime 1020000 emits positional tuples; runtime 1021000 switched the Loans pallet to
named fields and introduced the DEX pallets. Every rule normalizes into one of
the version-independent records of core.domain.entities.decoded_event_entity.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from pydantic import BaseModel, ConfigDict, Field

from core.domain.entities.decoded_event_entity import (
    AssetSwapDecoded,
    InterestAccruedDecoded,
    LoanAmountDecoded,
    MarketActivationDecoded,
    MarketDecoded,
    MarketParams,
    RateModel,
    StableExchangeDecoded,
)
from core.domain.enums.market_enums import MarketState, RateModelKind
from core.services.currency_codec_service import CurrencyCodecService
from core.services.versioned_decoder import VersionedDecoderRegistry

V1020000 = 1020000
V1021000 = 1021000

NEW_MARKET = "Loans.NewMarket"
UPDATED_MARKET = "Loans.UpdatedMarket"
ACTIVATED_MARKET = "Loans.ActivatedMarket"
BORROWED = "Loans.Borrowed"
DEPOSIT_COLLATERAL = "Loans.DepositCollateral"
WITHDRAW_COLLATERAL = "Loans.WithdrawCollateral"
DEPOSITED = "Loans.Deposited"
REPAID_BORROW = "Loans.RepaidBorrow"
REDEEMED = "Loans.Redeemed"
INTEREST_ACCRUED = "Loans.InterestAccrued"
ASSET_SWAP = "DexGeneral.AssetSwap"
CURRENCY_EXCHANGE = "DexStable.CurrencyExchange"

LOAN_AMOUNT_EVENTS = (BORROWED, DEPOSIT_COLLATERAL, WITHDRAW_COLLATERAL, DEPOSITED, REPAID_BORROW, REDEEMED)

event_decoders: VersionedDecoderRegistry[Any] = VersionedDecoderRegistry("event")


class _RawArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class _RawMarket(_RawArgs):
    collateral_factor: int = Field(alias="collateralFactor")
    liquidation_threshold: int = Field(alias="liquidationThreshold")
    reserve_factor: int = Field(alias="reserveFactor")
    close_factor: int = Field(alias="closeFactor")
    liquidate_incentive: int = Field(alias="liquidateIncentive")
    # absent before 1021000
    liquidate_incentive_reserved_factor: int = Field(default=0, alias="liquidateIncentiveReservedFactor")
    rate_model: Dict[str, Any] = Field(alias="rateModel")
    state: Dict[str, Any]
    supply_cap: int = Field(alias="supplyCap")
    borrow_cap: int = Field(alias="borrowCap")
    lend_token_id: Dict[str, Any] = Field(alias="lendTokenId")


class _RawAccountAmount(_RawArgs):
    account_id: Any = Field(alias="accountId")
    currency_id: Dict[str, Any] = Field(alias="currencyId")
    amount: int


class _RawInterestAccrued(_RawArgs):
    underlying_currency_id: Dict[str, Any] = Field(alias="underlyingCurrencyId")
    total_borrows: int = Field(alias="totalBorrows")
    total_reserves: int = Field(alias="totalReserves")
    borrow_index: int = Field(alias="borrowIndex")
    utilization_ratio: int = Field(alias="utilizationRatio")
    borrow_rate: int = Field(alias="borrowRate")
    supply_rate: int = Field(alias="supplyRate")
    exchange_rate: int = Field(alias="exchangeRate")


class _RawCurrencyExchange(_RawArgs):
    pool_id: int = Field(alias="poolId")
    who: Any
    in_index: int = Field(alias="inIndex")
    in_amount: int = Field(alias="inAmount")
    out_index: int = Field(alias="outIndex")
    out_amount: int = Field(alias="outAmount")


def _decode_rate_model(raw: Mapping[str, Any]) -> RateModel:
    kind = RateModelKind(raw["__kind"])
    value = raw.get("value") or {}
    if kind == RateModelKind.JUMP:
        return RateModel(
            kind=kind,
            base_rate=int(value["baseRate"]),
            jump_rate=int(value["jumpRate"]),
            full_rate=int(value["fullRate"]),
            jump_utilization=int(value["jumpUtilization"]),
        )
    return RateModel(kind=kind, base_rate=int(value["baseRate"]))


def _decode_market(raw: Any) -> MarketParams:
    market = _RawMarket.model_validate(raw)
    lend_token = CurrencyCodecService.decode_currency_id(market.lend_token_id)
    return MarketParams(
        collateral_factor=market.collateral_factor,
        liquidation_threshold=market.liquidation_threshold,
        reserve_factor=market.reserve_factor,
        close_factor=market.close_factor,
        liquidate_incentive=market.liquidate_incentive,
        liquidate_incentive_reserved_factor=market.liquidate_incentive_reserved_factor,
        rate_model=_decode_rate_model(market.rate_model),
        state=MarketState(market.state["__kind"]),
        supply_cap=market.supply_cap,
        borrow_cap=market.borrow_cap,
        lend_token_id=int(lend_token.lend_token_id),
    )


def _market_v1020000(args: Any) -> MarketDecoded:
    underlying, market = args
    return MarketDecoded(
        underlying=CurrencyCodecService.decode_currency_id(underlying),
        market=_decode_market(market),
    )


def _market_v1021000(args: Any) -> MarketDecoded:
    return MarketDecoded(
        underlying=CurrencyCodecService.decode_currency_id(args["underlyingCurrencyId"]),
        market=_decode_market(args["market"]),
    )


for _name in (NEW_MARKET, UPDATED_MARKET):
    event_decoders.register(_name, since=V1020000, until=V1021000)(_market_v1020000)
    event_decoders.register(_name, since=V1021000)(_market_v1021000)


@event_decoders.register(ACTIVATED_MARKET, since=V1020000, until=V1021000)
def _activated_market_v1020000(args: Any) -> MarketActivationDecoded:
    return MarketActivationDecoded(underlying=CurrencyCodecService.decode_currency_id(args))


@event_decoders.register(ACTIVATED_MARKET, since=V1021000)
def _activated_market_v1021000(args: Any) -> MarketActivationDecoded:
    return MarketActivationDecoded(underlying=CurrencyCodecService.decode_currency_id(args["underlyingCurrencyId"]))


def _account_amount_v1020000(args: Any) -> LoanAmountDecoded:
    account_id, currency_id, amount = args
    return LoanAmountDecoded(
        account_id=CurrencyCodecService.encode_account(account_id),
        currency=CurrencyCodecService.decode_currency_id(currency_id),
        amount=int(amount),
    )


def _account_amount_v1021000(args: Any) -> LoanAmountDecoded:
    raw = _RawAccountAmount.model_validate(args)
    return LoanAmountDecoded(
        account_id=CurrencyCodecService.encode_account(raw.account_id),
        currency=CurrencyCodecService.decode_currency_id(raw.currency_id),
        amount=raw.amount,
    )


for _name in LOAN_AMOUNT_EVENTS:
    event_decoders.register(_name, since=V1020000, until=V1021000)(_account_amount_v1020000)
    event_decoders.register(_name, since=V1021000)(_account_amount_v1021000)


@event_decoders.register(INTEREST_ACCRUED, since=V1021000)
def _interest_accrued_v1021000(args: Any) -> InterestAccruedDecoded:
    raw = _RawInterestAccrued.model_validate(args)
    return InterestAccruedDecoded(
        underlying=CurrencyCodecService.decode_currency_id(raw.underlying_currency_id),
        total_borrows=raw.total_borrows,
        total_reserves=raw.total_reserves,
        borrow_index=raw.borrow_index,
        utilization_ratio=raw.utilization_ratio,
        borrow_rate=raw.borrow_rate,
        supply_rate=raw.supply_rate,
        exchange_rate=raw.exchange_rate,
    )


@event_decoders.register(ASSET_SWAP, since=V1021000)
def _asset_swap_v1021000(args: Any) -> AssetSwapDecoded:
    account_id, recipient, swap_path, balances = args
    raw_path: List[Any] = list(swap_path)
    return AssetSwapDecoded(
        account_id=CurrencyCodecService.encode_account(account_id),
        recipient=CurrencyCodecService.encode_account(recipient),
        path=[CurrencyCodecService.decode_currency_id(c) for c in raw_path],
        raw_path=raw_path,
        balances=[int(b) for b in balances],
    )


@event_decoders.register(CURRENCY_EXCHANGE, since=V1021000)
def _currency_exchange_v1021000(args: Any) -> StableExchangeDecoded:
    raw = _RawCurrencyExchange.model_validate(args)
    return StableExchangeDecoded(
        account_id=CurrencyCodecService.encode_account(raw.who),
        pool_id=raw.pool_id,
        in_index=raw.in_index,
        in_amount=raw.in_amount,
        out_index=raw.out_index,
        out_amount=raw.out_amount,
    )
