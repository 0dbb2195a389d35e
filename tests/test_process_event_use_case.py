"""
Tests for event dispatch and per-event error isolation.
"""

import logging

from conftest import ALICE, foreign_id, lend_id, make_block, make_event, token_id
from core.domain.entities.dex_entity import CumulativeDexTradeCount
from core.domain.entities.loan_entity import Loan, LoanMarket
from core.services.event_decoder_service import (
    ASSET_SWAP,
    BORROWED,
    CURRENCY_EXCHANGE,
    INTEREST_ACCRUED,
    NEW_MARKET,
    V1020000,
)
from core.services.indexing_session import IndexingSession
from core.services.storage_decoder_service import STABLE_POOLS
from core.usecases.process_event_use_case import EventOutcome, ProcessEventUseCase


def borrowed(event_id, amount=10):
    return make_event(BORROWED, {"accountId": ALICE, "currencyId": token_id("KSM"), "amount": amount}, event_id=event_id)


def swap(event_id, balances=(100, 99)):
    return make_event(ASSET_SWAP, [ALICE, ALICE, [token_id("KSM"), foreign_id(3)], list(balances)], event_id=event_id)


class TestExecute:
    async def test_routes_every_indexed_event(self, processor):
        assert BORROWED in processor.handled_events
        assert ASSET_SWAP in processor.handled_events
        assert CURRENCY_EXCHANGE in processor.handled_events

    async def test_unknown_event_is_ignored(self, processor, session):
        outcome = await processor.execute(make_event("Balances.Transfer", {}), make_block())

        assert outcome == EventOutcome.IGNORED
        assert len(session.buffer) == 0

    async def test_unknown_version_is_skipped(self, processor, caplog):
        event = make_event(INTEREST_ACCRUED, {}, spec_version=V1020000)

        with caplog.at_level(logging.WARNING):
            assert await processor.execute(event, make_block()) == EventOutcome.SKIPPED

        assert "UNKNOWN EVENT VERSION" in caplog.text

    async def test_strict_versions_fail_the_event(self, chain_state, entity_repository, caplog):
        strict = IndexingSession(chain_state=chain_state, entity_repository=entity_repository, strict_event_versions=True)
        processor = ProcessEventUseCase(session=strict)
        event = make_event(INTEREST_ACCRUED, {}, spec_version=V1020000)

        with caplog.at_level(logging.ERROR):
            assert await processor.execute(event, make_block()) == EventOutcome.FAILED

        assert "No decoding rule" in caplog.text

    async def test_schema_violation_fails_the_event(self, processor, caplog):
        event = make_event(NEW_MARKET, {"underlyingCurrencyId": token_id("KSM")})

        with caplog.at_level(logging.ERROR):
            assert await processor.execute(event, make_block()) == EventOutcome.FAILED

        assert NEW_MARKET in caplog.text


class TestProcessBlock:
    async def test_failure_does_not_stop_the_block(self, processor, session):
        block = make_block(
            events=[
                borrowed("1-0"),
                swap("1-1", balances=(100,)),
                borrowed("1-2"),
                make_event("System.ExtrinsicSuccess", {}, event_id="1-3"),
            ]
        )

        result = await processor.process_block(block)

        assert (result.processed, result.skipped, result.failed) == (2, 0, 1)
        assert result.failed_event_ids == ["1-1"]
        assert [loan.id for loan in session.buffer.items(Loan)] == ["1-0", "1-2"]

    async def test_events_fold_in_block_order(self, processor, session):
        block = make_block(timestamp=5000, events=[swap("1-0"), swap("1-1"), swap("1-2")])

        result = await processor.process_block(block)

        assert result.processed == 3
        assert session.buffer.get(CumulativeDexTradeCount, "total@5000").count == 3

    async def test_missing_stable_pool_is_skipped(self, processor, session):
        event = make_event(
            CURRENCY_EXCHANGE,
            {"poolId": 3, "who": ALICE, "inIndex": 0, "inAmount": 1, "outIndex": 1, "outAmount": 1},
        )

        result = await processor.process_block(make_block(events=[event]))

        assert (result.processed, result.skipped, result.failed) == (0, 1, 0)

    async def test_unsupported_pool_type_fails(self, processor, chain_state):
        chain_state.set(STABLE_POOLS, 3, {"__kind": "Lending", "value": {}})
        event = make_event(
            CURRENCY_EXCHANGE,
            {"poolId": 3, "who": ALICE, "inIndex": 0, "inAmount": 1, "outIndex": 1, "outAmount": 1},
        )

        result = await processor.process_block(make_block(events=[event]))

        assert result.failed == 1

    async def test_market_then_collateral_in_one_block(self, processor, session):
        market = {
            "collateralFactor": 1,
            "liquidationThreshold": 1,
            "reserveFactor": 1,
            "closeFactor": 1,
            "liquidateIncentive": 1,
            "rateModel": {"__kind": "Curve", "value": {"baseRate": 1}},
            "state": {"__kind": "Pending"},
            "supplyCap": 1,
            "borrowCap": 1,
            "lendTokenId": lend_id(1),
        }
        events = [
            make_event(NEW_MARKET, [token_id("KSM"), market], event_id="1-0", spec_version=V1020000),
            make_event(
                "Loans.DepositCollateral",
                [ALICE, lend_id(1), 10**14],
                event_id="1-1",
                spec_version=V1020000,
            ),
        ]

        result = await processor.process_block(make_block(events=events))

        assert result.processed == 2
        assert session.buffer.get(LoanMarket, "loanMarket_KSM") is not None
