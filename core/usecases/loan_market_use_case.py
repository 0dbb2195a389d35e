from __future__ import annotations

from core.domain.entities.block_entity import BlockHeader, Height, RawEvent
from core.domain.entities.decoded_event_entity import MarketActivationDecoded, MarketDecoded
from core.domain.entities.loan_entity import LoanMarket, LoanMarketActivation
from core.domain.enums.market_enums import MarketState
from core.services.market_lookup_service import market_id_for
from core.usecases.base_event_use_case import EventUseCase


class LoanMarketUseCase(EventUseCase):
    """
    Maintains LoanMarket records from NewMarket, UpdatedMarket and ActivatedMarket.

    A market is keyed by its underlying currency; later events rewrite the
    same record in place.
    """

    def _build_market(self, decoded: MarketDecoded, *, height: Height, timestamp: int, state: MarketState) -> LoanMarket:
        params = decoded.market
        return LoanMarket(
            id=market_id_for(decoded.underlying),
            token=decoded.underlying,
            height=height,
            timestamp=int(timestamp),
            borrow_cap=params.borrow_cap,
            supply_cap=params.supply_cap,
            rate_model=params.rate_model,
            close_factor=params.close_factor,
            lend_token_id=params.lend_token_id,
            state=state,
            reserve_factor=params.reserve_factor,
            collateral_factor=params.collateral_factor,
            liquidate_incentive=params.liquidate_incentive,
            liquidation_threshold=params.liquidation_threshold,
            liquidate_incentive_reserved_factor=params.liquidate_incentive_reserved_factor,
        )

    async def new_market(self, event: RawEvent, block: BlockHeader) -> bool:
        decoded: MarketDecoded | None = self._decode(event)
        if decoded is None:
            return False

        height = await self._session.heights.resolve(block.height)
        market = self._build_market(decoded, height=height, timestamp=block.timestamp, state=MarketState.PENDING)

        self._session.buffer.push_entity(market)
        self._session.markets.remember(market)
        return True

    async def updated_market(self, event: RawEvent, block: BlockHeader) -> bool:
        decoded: MarketDecoded | None = self._decode(event)
        if decoded is None:
            return False

        height = await self._session.heights.resolve(block.height)
        market = self._build_market(decoded, height=height, timestamp=block.timestamp, state=decoded.market.state)

        existing = await self._session.markets.get_market(market.id)
        if existing is not None and existing.activation is not None:
            market = market.model_copy(update={"activation": existing.activation})

        self._session.buffer.push_entity(market)
        self._session.markets.remember(market)
        self._logger.info("Updated %s state=%s", market.id, market.state)
        return True

    async def activated_market(self, event: RawEvent, block: BlockHeader) -> bool:
        decoded: MarketActivationDecoded | None = self._decode(event)
        if decoded is None:
            return False

        market_id = market_id_for(decoded.underlying)
        market = await self._session.markets.get_market(market_id)
        if market is None:
            self._logger.warning("ActivatedMarket event did not match any existing LoanMarket id=%s; skipping", market_id)
            return False

        height = await self._session.heights.resolve(block.height)
        activation = LoanMarketActivation(
            id=market.id,
            market_id=market.id,
            token=decoded.underlying,
            height=height,
            timestamp=int(block.timestamp),
        )
        market = market.model_copy(update={"state": MarketState.ACTIVE, "activation": activation})

        self._session.buffer.push_entity(activation)
        self._session.buffer.push_entity(market)
        self._logger.info("Activated %s", market.id)
        return True
