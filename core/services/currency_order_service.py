from __future__ import annotations

from typing import Dict, Tuple

from core.domain.entities.currency_entity import (
    Currency,
    ForeignAsset,
    LendToken,
    NativeToken,
    PoolShare,
    PoolSharePair,
)
from core.domain.enums.currency_enums import CurrencyKind, Token
from core.domain.exceptions import UnknownAssetVariant
from core.services.currency_codec_service import CurrencyCodecService

# Discriminant order of the chain's CurrencyId enum
CURRENCY_TYPE_INDEX: Dict[str, int] = {
    CurrencyKind.NATIVE_TOKEN.value: 0,
    CurrencyKind.FOREIGN_ASSET.value: 1,
    CurrencyKind.LEND_TOKEN.value: 2,
    CurrencyKind.POOL_SHARE_PAIR.value: 3,
    CurrencyKind.POOL_SHARE.value: 4,
}

# Discriminant order of the chain's TokenSymbol enum
NATIVE_TOKEN_INDEX: Dict[Token, int] = {
    Token.DOT: 0,
    Token.IBTC: 1,
    Token.INTR: 2,
    Token.KSM: 10,
    Token.KBTC: 11,
    Token.KINT: 12,
}


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


class CurrencyOrderService:
    """
    Total order over currencies, replicating the parachain's derived Ord.

    Rules:
    - First by variant rank (CURRENCY_TYPE_INDEX).
    - Then by a variant-specific index: native tokens use NATIVE_TOKEN_INDEX,
      ids are compared numerically, pairs compare their members lexicographically.
    """

    @staticmethod
    def _type_index(currency: Currency) -> int:
        index = CURRENCY_TYPE_INDEX.get(getattr(currency, "kind", None))
        if index is None:
            raise UnknownAssetVariant(currency)
        return index

    @staticmethod
    def _index(currency: Currency) -> int:
        if isinstance(currency, NativeToken):
            index = NATIVE_TOKEN_INDEX.get(Token(currency.token))
            if index is None:
                raise UnknownAssetVariant(currency, context="native token")
            return index
        if isinstance(currency, ForeignAsset):
            return currency.asset
        if isinstance(currency, LendToken):
            return currency.lend_token_id
        if isinstance(currency, PoolShare):
            return currency.pool_id
        raise UnknownAssetVariant(currency)

    @staticmethod
    def compare(currency0: Currency, currency1: Currency) -> int:
        """
        Returns -1 if currency0 sorts before currency1, 1 if after, 0 if equal.
        """
        type_cmp = CurrencyOrderService._type_index(currency0) - CurrencyOrderService._type_index(currency1)
        if type_cmp != 0:
            return _sign(type_cmp)

        if isinstance(currency0, PoolSharePair) and isinstance(currency1, PoolSharePair):
            first = CurrencyOrderService.compare(currency0.token0, currency1.token0)
            if first != 0:
                return first
            return CurrencyOrderService.compare(currency0.token1, currency1.token1)

        return _sign(CurrencyOrderService._index(currency0) - CurrencyOrderService._index(currency1))

    @staticmethod
    def order_pair(currency0: Currency, currency1: Currency) -> Tuple[Currency, Currency]:
        """
        The two currencies in the order the parachain would store them.
        """
        if CurrencyOrderService.compare(currency0, currency1) > 0:
            return currency1, currency0
        return currency0, currency1

    @staticmethod
    def infer_pool_id(currency0: Currency, currency1: Currency) -> str:
        """
        Standard pool id for a currency pair: "(<lo>,<hi>)", independent of argument order.
        """
        first, second = CurrencyOrderService.order_pair(currency0, currency1)
        return f"({CurrencyCodecService.to_string(first)},{CurrencyCodecService.to_string(second)})"
