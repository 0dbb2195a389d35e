from __future__ import annotations

import logging
from typing import Dict, Optional

from core.domain.entities.currency_entity import Currency
from core.domain.entities.loan_entity import LoanMarket
from core.repositories.entity_repository import EntityRepository
from core.services.currency_codec_service import CurrencyCodecService
from core.services.entity_buffer_service import EntityBuffer


def market_id_for(currency: Currency) -> str:
    return f"loanMarket_{CurrencyCodecService.to_string(currency)}"


class MarketLookupService:
    """
    Resolves lending markets, preferring records staged in the current batch.

    Lend token ids are memoized against their market's underlying currency
    once seen, since that mapping never changes for a market.
    """

    def __init__(
        self,
        *,
        buffer: EntityBuffer,
        entity_repository: EntityRepository,
        logger: logging.Logger | None = None,
    ) -> None:
        self._buffer = buffer
        self._repo = entity_repository
        self._underlying_by_lend_token: Dict[int, Currency] = {}
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    def remember(self, market: LoanMarket) -> None:
        self._underlying_by_lend_token[int(market.lend_token_id)] = market.token

    async def get_market(self, market_id: str) -> Optional[LoanMarket]:
        staged = self._buffer.get(LoanMarket, market_id)
        if staged is not None:
            return staged
        return await self._repo.get_by_id(LoanMarket, market_id)

    async def underlying_for_lend_token(self, lend_token_id: int) -> Optional[Currency]:
        cached = self._underlying_by_lend_token.get(int(lend_token_id))
        if cached is not None:
            return cached

        market = self._buffer.find_latest(
            LoanMarket,
            lambda m: int(m.lend_token_id) == int(lend_token_id),
            key=lambda m: m.timestamp,
        )
        if market is None:
            market = await self._repo.find_market_by_lend_token(int(lend_token_id))
        if market is None:
            self._logger.warning("No loan market found for lend_token_id=%s", lend_token_id)
            return None

        self.remember(market)
        return market.token

    def reset(self) -> None:
        self._underlying_by_lend_token.clear()
