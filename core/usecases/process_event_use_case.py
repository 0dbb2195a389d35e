from __future__ import annotations

import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, List

from pydantic import BaseModel, Field

from core.domain.entities.block_entity import BlockHeader, RawEvent
from core.services.event_decoder_service import (
    ACTIVATED_MARKET,
    ASSET_SWAP,
    BORROWED,
    CURRENCY_EXCHANGE,
    DEPOSIT_COLLATERAL,
    DEPOSITED,
    INTEREST_ACCRUED,
    NEW_MARKET,
    REDEEMED,
    REPAID_BORROW,
    UPDATED_MARKET,
    WITHDRAW_COLLATERAL,
)
from core.services.indexing_session import IndexingSession
from core.usecases.dex_swap_use_case import DexSwapUseCase
from core.usecases.loan_activity_use_case import LoanActivityUseCase
from core.usecases.loan_market_use_case import LoanMarketUseCase

EventHandler = Callable[[RawEvent, BlockHeader], Awaitable[bool]]


class EventOutcome(str, Enum):
    PROCESSED = "processed"
    SKIPPED = "skipped"
    FAILED = "failed"
    IGNORED = "ignored"


class BatchResult(BaseModel):
    """
    Outcome counts of one processed block. Ignored events (no handler) are not counted.
    """

    processed: int = 0
    skipped: int = 0
    failed: int = 0
    failed_event_ids: List[str] = Field(default_factory=list)


class ProcessEventUseCase:
    """
    Routes chain events to their handlers, one at a time and in block order.

    A failing event is logged with its traceback and counted; the rest of the
    block is still processed.
    """

    def __init__(self, *, session: IndexingSession, logger: logging.Logger | None = None) -> None:
        self._session = session
        self._logger = logger or logging.getLogger(self.__class__.__name__)

        markets = LoanMarketUseCase(session=session)
        loans = LoanActivityUseCase(session=session)
        dex = DexSwapUseCase(session=session)

        self._handlers: Dict[str, EventHandler] = {
            NEW_MARKET: markets.new_market,
            UPDATED_MARKET: markets.updated_market,
            ACTIVATED_MARKET: markets.activated_market,
            BORROWED: loans.borrowed,
            REPAID_BORROW: loans.repaid,
            DEPOSITED: loans.deposited,
            REDEEMED: loans.redeemed,
            DEPOSIT_COLLATERAL: loans.deposit_collateral,
            WITHDRAW_COLLATERAL: loans.withdraw_collateral,
            INTEREST_ACCRUED: loans.interest_accrued,
            ASSET_SWAP: dex.asset_swap,
            CURRENCY_EXCHANGE: dex.stable_exchange,
        }

    @property
    def handled_events(self) -> List[str]:
        return sorted(self._handlers)

    async def execute(self, event: RawEvent, block: BlockHeader) -> EventOutcome:
        handler = self._handlers.get(event.name)
        if handler is None:
            self._logger.debug("No handler for %s id=%s", event.name, event.id)
            return EventOutcome.IGNORED

        try:
            staged = await handler(event, block)
        except Exception as exc:
            self._logger.exception("Failed processing %s id=%s at height=%s: %s", event.name, event.id, block.height, exc)
            return EventOutcome.FAILED

        return EventOutcome.PROCESSED if staged else EventOutcome.SKIPPED

    async def process_block(self, block: BlockHeader) -> BatchResult:
        result = BatchResult()
        for event in block.events:
            outcome = await self.execute(event, block)
            if outcome == EventOutcome.PROCESSED:
                result.processed += 1
            elif outcome == EventOutcome.SKIPPED:
                result.skipped += 1
            elif outcome == EventOutcome.FAILED:
                result.failed += 1
                result.failed_event_ids.append(event.id)

        if result.failed:
            self._logger.warning(
                "Block height=%s finished with failures: processed=%s skipped=%s failed=%s",
                block.height,
                result.processed,
                result.skipped,
                result.failed,
            )
        return result
