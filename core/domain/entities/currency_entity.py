# core/domain/entities/currency_entity.py
from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from core.domain.enums.currency_enums import Token


class _CurrencyModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class NativeToken(_CurrencyModel):
    kind: Literal["NativeToken"] = "NativeToken"
    token: Token


class ForeignAsset(_CurrencyModel):
    kind: Literal["ForeignAsset"] = "ForeignAsset"
    asset: int


class LendToken(_CurrencyModel):
    kind: Literal["LendToken"] = "LendToken"
    lend_token_id: int


class PoolShare(_CurrencyModel):
    """
    LP token of a stable pool (chain: StableLpToken).
    """

    kind: Literal["PoolShare"] = "PoolShare"
    pool_id: int


LpToken = Annotated[Union[NativeToken, ForeignAsset, PoolShare], Field(discriminator="kind")]


class PoolSharePair(_CurrencyModel):
    """
    LP token of a standard pool (chain: LpToken(token0, token1)).
    """

    kind: Literal["PoolSharePair"] = "PoolSharePair"
    token0: LpToken
    token1: LpToken


Currency = Annotated[
    Union[NativeToken, ForeignAsset, LendToken, PoolShare, PoolSharePair],
    Field(discriminator="kind"),
]

# Currencies that can be members of a trading pool
POOLED_TOKEN_TYPES = (NativeToken, ForeignAsset, PoolShare)


def is_pooled_token(currency: object) -> bool:
    return isinstance(currency, POOLED_TOKEN_TYPES)
