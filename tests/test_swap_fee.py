"""
Unit tests for swap fee rates and fee amounts.
"""

from decimal import Decimal

import pytest

from conftest import foreign_id, make_block, token_id
from core.domain.entities.currency_entity import ForeignAsset, NativeToken
from core.domain.entities.dex_entity import SwapDetails, SwapLeg
from core.domain.enums.currency_enums import Token
from core.services.pool_cache_service import StablePoolCache
from core.services.storage_decoder_service import PAIR_STATUSES, STABLE_POOLS
from core.services.swap_fee_service import SwapFeeService, fee_amount

KSM = NativeToken(token=Token.KSM)
USDT = ForeignAsset(asset=3)


def details(from_amount=1_000_000, to_amount=990_000, reverse=False):
    ksm = SwapLeg(currency=KSM, atomic_amount=from_amount, account_id="0x01", raw_currency_id=token_id("KSM"))
    usdt = SwapLeg(currency=USDT, atomic_amount=to_amount, account_id="0x01", raw_currency_id=foreign_id(3))
    if reverse:
        return SwapDetails(from_leg=usdt, to_leg=ksm)
    return SwapDetails(from_leg=ksm, to_leg=usdt)


@pytest.fixture
def fees(chain_state):
    return SwapFeeService(chain_state=chain_state, pool_cache=StablePoolCache(chain_state=chain_state))


class TestFeeAmount:
    def test_basis_points(self):
        assert fee_amount(Decimal("0.003"), 1_000_000) == 3000

    def test_rounds_down(self):
        assert fee_amount(Decimal("0.003"), 999) == 2
        assert fee_amount(Decimal("0.003"), 333) == 0

    def test_large_amounts_stay_exact(self):
        amount = 2**127 + 12345
        assert fee_amount(Decimal("0.0001"), amount) == amount // 10000


class TestStandardFeeRate:
    async def test_trading_pair(self, fees, chain_state):
        chain_state.set(PAIR_STATUSES, [token_id("KSM"), foreign_id(3)], {"__kind": "Trading", "value": {"feeRate": 30}})

        assert await fees.standard_fee_rate(details(), make_block()) == Decimal("0.003")

    async def test_pair_key_is_ordered(self, fees, chain_state):
        chain_state.set(PAIR_STATUSES, [token_id("KSM"), foreign_id(3)], {"__kind": "Trading", "value": {"feeRate": 30}})

        await fees.standard_fee_rate(details(reverse=True), make_block())

        assert chain_state.calls == [(PAIR_STATUSES, [token_id("KSM"), foreign_id(3)])]

    async def test_not_trading_is_zero(self, fees, chain_state):
        chain_state.set(PAIR_STATUSES, [token_id("KSM"), foreign_id(3)], {"__kind": "Bootstrap", "value": {}})

        assert await fees.standard_fee_rate(details(), make_block()) == 0

    async def test_missing_pair_is_zero(self, fees):
        assert await fees.standard_fee_rate(details(), make_block()) == 0

    async def test_undefined_storage_is_zero(self, fees, chain_state):
        chain_state.undefined.add(PAIR_STATUSES)

        assert await fees.standard_fee_rate(details(), make_block()) == 0


class TestBuildSwap:
    async def test_fee_leg_is_charged_on_input(self, fees, chain_state):
        chain_state.set(STABLE_POOLS, 0, {"__kind": "Base", "value": {"currencyIds": [token_id("KSM")], "fee": 30_000_000}})
        rate = await fees.stable_fee_rate(0, make_block())

        swap = SwapFeeService.build_swap(
            swap_id="e-0",
            details=details(),
            pool_type="Stable",
            pool_id="0",
            fee_rate=rate,
            height={"absolute": 1, "active": 1},
            timestamp=1000,
        )

        assert swap.fees.token == KSM
        assert swap.fees.amount == 3000
        assert swap.fee_rate == Decimal("0.003")
        assert swap.from_account == swap.to_account == "0x01"
