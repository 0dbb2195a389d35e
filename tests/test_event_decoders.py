"""
Unit tests for the versioned event decoding rules.
"""

import logging

import pytest
from pydantic import ValidationError

from conftest import foreign_id, lend_id, token_id
from core.domain.entities.currency_entity import ForeignAsset, LendToken, NativeToken
from core.domain.enums.currency_enums import Token
from core.domain.enums.market_enums import MarketState, RateModelKind
from core.domain.exceptions import EventSchemaViolation, UnknownSpecVersion
from core.services.event_decoder_service import (
    ACTIVATED_MARKET,
    ASSET_SWAP,
    BORROWED,
    CURRENCY_EXCHANGE,
    INTEREST_ACCRUED,
    NEW_MARKET,
    V1020000,
    V1021000,
    event_decoders,
)
from core.services.versioned_decoder import DecodingRule, VersionedDecoderRegistry


def market_args(**overrides):
    market = {
        "collateralFactor": 540000,
        "liquidationThreshold": 610000,
        "reserveFactor": 200000,
        "closeFactor": 500000,
        "liquidateIncentive": 1100000000000000000,
        "rateModel": {
            "__kind": "Jump",
            "value": {
                "baseRate": 0,
                "jumpRate": 150000000000000000,
                "fullRate": 400000000000000000,
                "jumpUtilization": 900000,
            },
        },
        "state": {"__kind": "Pending"},
        "supplyCap": 10**22,
        "borrowCap": 10**21,
        "lendTokenId": lend_id(1),
    }
    market.update(overrides)
    return market


class TestRegistry:
    def test_open_range_matches_later_versions(self):
        rule = DecodingRule(name="X", since=10, until=None, decode=lambda p: p)
        assert rule.matches(10)
        assert rule.matches(10_000)
        assert not rule.matches(9)

    def test_closed_range_excludes_until(self):
        rule = DecodingRule(name="X", since=10, until=20, decode=lambda p: p)
        assert rule.matches(19)
        assert not rule.matches(20)

    def test_rule_is_immutable(self):
        rule = DecodingRule(name="X", since=10, decode=lambda p: p)

        with pytest.raises(ValidationError):
            rule.since = 5
        assert rule.until is None

    def test_overlapping_rules_are_rejected(self):
        registry = VersionedDecoderRegistry("test")
        registry.register("X", since=10, until=20)(lambda p: p)

        with pytest.raises(ValueError):
            registry.register("X", since=15)(lambda p: p)

    def test_adjacent_rules_pick_by_version(self):
        registry = VersionedDecoderRegistry("test")
        registry.register("X", since=10, until=20)(lambda p: "old")
        registry.register("X", since=20)(lambda p: "new")

        assert registry.decode("X", 15, None) == "old"
        assert registry.decode("X", 25, None) == "new"

    def test_every_event_has_a_current_rule(self):
        for name in event_decoders.names():
            assert event_decoders.find_rule(name, V1021000) is not None


class TestUnknownVersion:
    def test_skips_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert event_decoders.decode(INTEREST_ACCRUED, V1020000, {}) is None

        assert "UNKNOWN EVENT VERSION" in caplog.text
        assert INTEREST_ACCRUED in caplog.text

    def test_strict_raises(self):
        with pytest.raises(UnknownSpecVersion):
            event_decoders.decode(ASSET_SWAP, V1020000, [], strict=True)

    def test_unregistered_name(self):
        assert event_decoders.decode("Tokens.Transfer", V1021000, {}) is None


class TestMarketEvents:
    def test_new_market_positional(self):
        decoded = event_decoders.decode(NEW_MARKET, V1020000, [token_id("KSM"), market_args()])

        assert decoded.underlying == NativeToken(token=Token.KSM)
        assert decoded.market.lend_token_id == 1
        assert decoded.market.state == MarketState.PENDING
        assert decoded.market.rate_model.kind == RateModelKind.JUMP
        assert decoded.market.rate_model.jump_utilization == 900000
        assert decoded.market.liquidate_incentive_reserved_factor == 0

    def test_new_market_named(self):
        args = {
            "underlyingCurrencyId": foreign_id(3),
            "market": market_args(liquidateIncentiveReservedFactor=5000, state={"__kind": "Active"}),
        }
        decoded = event_decoders.decode(NEW_MARKET, V1021000, args)

        assert decoded.underlying == ForeignAsset(asset=3)
        assert decoded.market.liquidate_incentive_reserved_factor == 5000
        assert decoded.market.state == MarketState.ACTIVE

    def test_curve_rate_model(self):
        args = [token_id("KINT"), market_args(rateModel={"__kind": "Curve", "value": {"baseRate": 20000}})]
        decoded = event_decoders.decode(NEW_MARKET, V1020000, args)

        assert decoded.market.rate_model.kind == RateModelKind.CURVE
        assert decoded.market.rate_model.base_rate == 20000
        assert decoded.market.rate_model.jump_rate is None

    def test_activated_market_versions(self):
        old = event_decoders.decode(ACTIVATED_MARKET, V1020000, token_id("KBTC"))
        new = event_decoders.decode(ACTIVATED_MARKET, V1021000, {"underlyingCurrencyId": token_id("KBTC")})

        assert old == new

    def test_missing_field_is_a_schema_violation(self):
        market = market_args()
        del market["borrowCap"]

        with pytest.raises(EventSchemaViolation):
            event_decoders.decode(NEW_MARKET, V1020000, [token_id("KSM"), market])


class TestAccountEvents:
    def test_borrowed_both_encodings_normalize_the_same(self):
        account = "0x" + "11" * 32
        old = event_decoders.decode(BORROWED, V1020000, [account, lend_id(2), 1000])
        new = event_decoders.decode(
            BORROWED, V1021000, {"accountId": account, "currencyId": lend_id(2), "amount": 1000}
        )

        assert old == new
        assert old.currency == LendToken(lend_token_id=2)
        assert old.amount == 1000

    def test_tuple_for_named_version_is_a_schema_violation(self):
        with pytest.raises(EventSchemaViolation):
            event_decoders.decode(BORROWED, V1021000, ["0x01", lend_id(2), 1000])

    def test_interest_accrued(self):
        args = {
            "underlyingCurrencyId": token_id("KSM"),
            "totalBorrows": 1,
            "totalReserves": 2,
            "borrowIndex": 3,
            "utilizationRatio": 4,
            "borrowRate": 5,
            "supplyRate": 6,
            "exchangeRate": 20_000_000_000_000_000,
        }
        decoded = event_decoders.decode(INTEREST_ACCRUED, V1021000, args)

        assert decoded.underlying == NativeToken(token=Token.KSM)
        assert decoded.exchange_rate == 20_000_000_000_000_000


class TestDexEvents:
    def test_asset_swap(self):
        args = ["0x01", "0x02", [token_id("KSM"), foreign_id(3)], [100, 95]]
        decoded = event_decoders.decode(ASSET_SWAP, V1021000, args)

        assert decoded.account_id == "0x01"
        assert decoded.recipient == "0x02"
        assert decoded.path == [NativeToken(token=Token.KSM), ForeignAsset(asset=3)]
        assert decoded.raw_path == [token_id("KSM"), foreign_id(3)]
        assert decoded.balances == [100, 95]

    def test_currency_exchange(self):
        args = {"poolId": 0, "who": "0x01", "inIndex": 1, "inAmount": 500, "outIndex": 0, "outAmount": 490}
        decoded = event_decoders.decode(CURRENCY_EXCHANGE, V1021000, args)

        assert decoded.pool_id == 0
        assert (decoded.in_index, decoded.in_amount, decoded.out_index, decoded.out_amount) == (1, 500, 0, 490)
