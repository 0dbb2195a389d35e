from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from core.domain.entities.currency_entity import (
    Currency,
    ForeignAsset,
    LendToken,
    NativeToken,
    PoolShare,
    PoolSharePair,
)
from core.domain.enums.currency_enums import Token
from core.domain.exceptions import UnknownAssetVariant

# Older runtimes named IBTC "INTERBTC"
_LEGACY_TOKEN_NAMES: Dict[str, str] = {"INTERBTC": "IBTC"}

_NATIVE_DECIMALS: Dict[Token, int] = {
    Token.DOT: 10,
    Token.IBTC: 8,
    Token.INTR: 10,
    Token.KSM: 12,
    Token.KBTC: 8,
    Token.KINT: 12,
}


class CurrencyCodecService:
    """
    Converts chain currency ids into Currency values and back into canonical keys.

    Raw ids arrive in the substrate JSON shape, e.g.
      {"__kind": "Token", "value": {"__kind": "DOT"}}
      {"__kind": "ForeignAsset", "value": 2}
      {"__kind": "LpToken", "value": [{"__kind": "Token", ...}, {"__kind": "StableLpToken", "value": 0}]}
    """

    @staticmethod
    def decode_token(raw: Any) -> NativeToken:
        name = raw.get("__kind") if isinstance(raw, Mapping) else raw
        name = _LEGACY_TOKEN_NAMES.get(str(name), str(name))
        try:
            return NativeToken(token=Token(name))
        except ValueError:
            raise UnknownAssetVariant(raw, context="native token") from None

    @staticmethod
    def decode_lp_token(raw: Any) -> Currency:
        kind = raw.get("__kind") if isinstance(raw, Mapping) else None
        if kind == "StableLpToken":
            return PoolShare(pool_id=int(raw["value"]))
        if kind == "ForeignAsset":
            return ForeignAsset(asset=int(raw["value"]))
        if kind == "Token":
            return CurrencyCodecService.decode_token(raw["value"])
        raise UnknownAssetVariant(raw, context="LpToken")

    @staticmethod
    def decode_currency_id(raw: Any) -> Currency:
        """
        Decode a raw CurrencyId into a Currency.

        Raises:
            UnknownAssetVariant: for any kind outside the known set.
        """
        kind = raw.get("__kind") if isinstance(raw, Mapping) else None
        if kind == "LendToken":
            return LendToken(lend_token_id=int(raw["value"]))
        if kind == "ForeignAsset":
            return ForeignAsset(asset=int(raw["value"]))
        if kind == "Token":
            return CurrencyCodecService.decode_token(raw["value"])
        if kind == "StableLpToken":
            return CurrencyCodecService.decode_lp_token(raw)
        if kind == "LpToken":
            token0, token1 = raw["value"]
            return PoolSharePair(
                token0=CurrencyCodecService.decode_lp_token(token0),
                token1=CurrencyCodecService.decode_lp_token(token1),
            )
        raise UnknownAssetVariant(raw)

    @staticmethod
    def to_string(currency: Currency) -> str:
        """
        Canonical key of a currency; pairs recurse into their members.
        """
        if isinstance(currency, LendToken):
            return f"lendToken_{currency.lend_token_id}"
        if isinstance(currency, ForeignAsset):
            return str(currency.asset)
        if isinstance(currency, NativeToken):
            return Token(currency.token).value
        if isinstance(currency, PoolShare):
            return f"poolId_{currency.pool_id}"
        if isinstance(currency, PoolSharePair):
            token0 = CurrencyCodecService.to_string(currency.token0)
            token1 = CurrencyCodecService.to_string(currency.token1)
            return f"lpToken__{token0}__{token1}"
        raise UnknownAssetVariant(currency)

    @staticmethod
    def symbol(currency: Currency, foreign_symbols: Optional[Mapping[int, str]] = None) -> str:
        """
        Ticker-like symbol used to key exchange rates.
        """
        if isinstance(currency, ForeignAsset) and foreign_symbols and currency.asset in foreign_symbols:
            return foreign_symbols[currency.asset]
        return CurrencyCodecService.to_string(currency)

    @staticmethod
    def friendly_amount(currency: Currency, atomic_amount: float) -> str:
        """
        Human amount with symbol; falls back to atomic units when decimals are unknown.
        """
        label = CurrencyCodecService.to_string(currency)
        if isinstance(currency, NativeToken):
            decimals = _NATIVE_DECIMALS[Token(currency.token)]
            human = Decimal(str(atomic_amount)) / (Decimal(10) ** decimals)
            return f"{human.normalize():f} {label}"
        return f"{atomic_amount} {label} (atomic)"

    @staticmethod
    def encode_account(raw: Any) -> str:
        """
        Account ids are kept as hex; address-format encoding is left to consumers.
        """
        if isinstance(raw, (bytes, bytearray)):
            return "0x" + bytes(raw).hex()
        return str(raw)


def short_account(account: str) -> str:
    """
    First and last four characters of an account, for record comments.
    """
    if len(account) <= 8:
        return account
    return f"{account[:4]}...{account[-4:]}"
