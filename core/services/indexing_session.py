from __future__ import annotations

import logging
from typing import Mapping, Optional

from core.repositories.chain_state_repository import ChainStateRepository
from core.repositories.entity_repository import EntityRepository
from core.repositories.height_repository import AbsoluteHeightRepository, HeightRepository
from core.services.cumulative_volume_service import CumulativeVolumeService
from core.services.entity_buffer_service import EntityBuffer
from core.services.exchange_rate_cache_service import DEFAULT_EXCHANGE_RATE, ExchangeRateCache
from core.services.market_lookup_service import MarketLookupService
from core.services.pool_cache_service import StablePoolCache
from core.services.swap_fee_service import SwapFeeService


class IndexingSession:
    """
    Everything one processing run shares: collaborators, caches and the emission buffer.

    Handlers receive the session explicitly; there is no module-level state.
    `reset()` drops caches and staged records so independent runs (or tests)
    start clean.
    """

    def __init__(
        self,
        *,
        chain_state: ChainStateRepository,
        entity_repository: EntityRepository,
        heights: Optional[HeightRepository] = None,
        default_exchange_rate: float = DEFAULT_EXCHANGE_RATE,
        strict_event_versions: bool = False,
        foreign_asset_symbols: Optional[Mapping[int, str]] = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.chain_state = chain_state
        self.entity_repository = entity_repository
        self.heights = heights or AbsoluteHeightRepository()
        self.strict_event_versions = bool(strict_event_versions)
        self.foreign_asset_symbols = dict(foreign_asset_symbols or {})
        self._logger = logger or logging.getLogger(self.__class__.__name__)

        self.buffer = EntityBuffer()
        self.pool_cache = StablePoolCache(chain_state=chain_state)
        self.exchange_rates = ExchangeRateCache(default_rate=default_exchange_rate)
        self.markets = MarketLookupService(buffer=self.buffer, entity_repository=entity_repository)
        self.volumes = CumulativeVolumeService(buffer=self.buffer, entity_repository=entity_repository)
        self.fees = SwapFeeService(chain_state=chain_state, pool_cache=self.pool_cache)

    def reset(self) -> None:
        self.buffer.clear()
        self.pool_cache.reset()
        self.exchange_rates.reset()
        self.markets.reset()
        self._logger.debug("Indexing session reset")
