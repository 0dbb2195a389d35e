"""
Unit tests for the canonical currency order and pool id inference.
"""

import itertools

import pytest

from core.domain.entities.currency_entity import ForeignAsset, LendToken, NativeToken, PoolShare, PoolSharePair
from core.domain.enums.currency_enums import Token
from core.services.currency_order_service import CurrencyOrderService

KSM = NativeToken(token=Token.KSM)
KBTC = NativeToken(token=Token.KBTC)
KINT = NativeToken(token=Token.KINT)
DOT = NativeToken(token=Token.DOT)
USDT = ForeignAsset(asset=3)
LKSM = LendToken(lend_token_id=1)
POOL0 = PoolShare(pool_id=0)

SAMPLE = [
    KSM,
    KBTC,
    KINT,
    DOT,
    USDT,
    ForeignAsset(asset=1),
    LKSM,
    POOL0,
    PoolShare(pool_id=2),
    PoolSharePair(token0=KSM, token1=USDT),
    PoolSharePair(token0=KBTC, token1=POOL0),
]


class TestCompare:
    def test_variant_rank_comes_first(self):
        """Native < foreign < lend < pair < stable share, whatever the ids."""
        pair = PoolSharePair(token0=KSM, token1=KBTC)
        ordered = [KINT, ForeignAsset(asset=0), LendToken(lend_token_id=0), pair, PoolShare(pool_id=0)]

        for earlier, later in zip(ordered, ordered[1:]):
            assert CurrencyOrderService.compare(earlier, later) == -1
            assert CurrencyOrderService.compare(later, earlier) == 1

    def test_native_tokens_follow_chain_discriminants(self):
        assert CurrencyOrderService.compare(DOT, KSM) == -1
        assert CurrencyOrderService.compare(KSM, KBTC) == -1
        assert CurrencyOrderService.compare(KBTC, KINT) == -1

    def test_ids_compare_numerically(self):
        assert CurrencyOrderService.compare(ForeignAsset(asset=2), ForeignAsset(asset=10)) == -1
        assert CurrencyOrderService.compare(PoolShare(pool_id=3), PoolShare(pool_id=3)) == 0

    def test_pairs_compare_members_in_order(self):
        a = PoolSharePair(token0=KSM, token1=USDT)
        b = PoolSharePair(token0=KSM, token1=ForeignAsset(asset=4))
        c = PoolSharePair(token0=KBTC, token1=ForeignAsset(asset=0))

        assert CurrencyOrderService.compare(a, b) == -1
        assert CurrencyOrderService.compare(b, c) == -1
        assert CurrencyOrderService.compare(a, a) == 0

    @pytest.mark.parametrize("a,b", list(itertools.combinations(SAMPLE, 2)))
    def test_antisymmetric(self, a, b):
        assert CurrencyOrderService.compare(a, b) == -CurrencyOrderService.compare(b, a)

    def test_equal_only_to_itself(self):
        for a, b in itertools.product(SAMPLE, SAMPLE):
            assert (CurrencyOrderService.compare(a, b) == 0) == (a == b)


class TestPoolId:
    def test_order_pair_is_argument_order_independent(self):
        assert CurrencyOrderService.order_pair(USDT, KSM) == (KSM, USDT)
        assert CurrencyOrderService.order_pair(KSM, USDT) == (KSM, USDT)

    def test_infer_pool_id(self):
        assert CurrencyOrderService.infer_pool_id(USDT, KSM) == "(KSM,3)"
        assert CurrencyOrderService.infer_pool_id(KSM, USDT) == "(KSM,3)"

    def test_infer_pool_id_with_stable_share(self):
        assert CurrencyOrderService.infer_pool_id(POOL0, KBTC) == "(KBTC,poolId_0)"

    @pytest.mark.parametrize("a,b", list(itertools.combinations(SAMPLE, 2)))
    def test_infer_pool_id_symmetric(self, a, b):
        assert CurrencyOrderService.infer_pool_id(a, b) == CurrencyOrderService.infer_pool_id(b, a)
