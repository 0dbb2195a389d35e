from __future__ import annotations

from enum import Enum


class Token(str, Enum):
    """
    Native tokens known to the parachain runtime.
    """

    DOT = "DOT"
    IBTC = "IBTC"
    INTR = "INTR"
    KSM = "KSM"
    KBTC = "KBTC"
    KINT = "KINT"


class CurrencyKind(str, Enum):
    """
    Discriminator values of the Currency union.
    """

    NATIVE_TOKEN = "NativeToken"
    FOREIGN_ASSET = "ForeignAsset"
    LEND_TOKEN = "LendToken"
    POOL_SHARE_PAIR = "PoolSharePair"
    POOL_SHARE = "PoolShare"
