from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ExchangeRateSample(BaseModel):
    """
    Lend token -> underlying exchange rate observed at a block.
    """

    height: int
    symbol: str
    rate: float
    is_fallback: bool = False

    model_config = ConfigDict(frozen=True)
