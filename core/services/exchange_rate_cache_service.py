from __future__ import annotations

import logging
from typing import Dict, List

from core.domain.entities.exchange_rate_entity import ExchangeRateSample

DEFAULT_EXCHANGE_RATE = 0.02


class ExchangeRateCache:
    """
    Point-in-time lend token exchange rates, per symbol.

    Samples are appended by InterestAccrued events in block order. A lookup
    returns the last sample at or before the queried height, so a deposit is
    valued with the rate that applied at its own block.
    """

    def __init__(
        self,
        *,
        default_rate: float = DEFAULT_EXCHANGE_RATE,
        logger: logging.Logger | None = None,
    ) -> None:
        self._default_rate = float(default_rate)
        self._samples: Dict[str, List[ExchangeRateSample]] = {}
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    def add_rate(self, height: int, symbol: str, rate: float) -> ExchangeRateSample:
        sample = ExchangeRateSample(height=int(height), symbol=symbol, rate=float(rate))
        self._samples.setdefault(symbol, []).append(sample)
        return sample

    def get_rate(self, height: int, symbol: str) -> ExchangeRateSample:
        for sample in reversed(self._samples.get(symbol, [])):
            if sample.height <= height:
                return sample

        self._logger.info("Returning default rate for %s at height=%s", symbol, height)
        return ExchangeRateSample(height=int(height), symbol=symbol, rate=self._default_rate, is_fallback=True)

    def reset(self) -> None:
        self._samples.clear()

    def __len__(self) -> int:
        return sum(len(samples) for samples in self._samples.values())
