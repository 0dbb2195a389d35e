"""
Shared fixtures for indexer tests.

Provides in-memory fakes for the external collaborators:
- FakeChainState: storage reads served from a dict, with a call log
- FakeEntityRepository: persisted records kept per kind
- session / processor wired on top of them
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from core.domain.entities.base_entity import IndexedEntity
from core.domain.entities.block_entity import BlockHeader, RawEvent, StorageSnapshot
from core.domain.entities.loan_entity import LoanMarket
from core.repositories.chain_state_repository import ChainStateRepository
from core.repositories.entity_repository import EntityRepository
from core.services.event_decoder_service import V1021000
from core.services.indexing_session import IndexingSession
from core.usecases.process_event_use_case import ProcessEventUseCase

ALICE = "0x" + "aa" * 32
BOB = "0x" + "bb" * 32


def _storage_key(name: str, key: Any) -> Tuple[str, str]:
    return name, json.dumps(key, sort_keys=True)


class FakeChainState(ChainStateRepository):
    """
    Storage reader backed by a dict. Items listed in `undefined` do not exist at any version.
    """

    def __init__(self, spec_version: int = V1021000) -> None:
        self.spec_version = spec_version
        self.values: Dict[Tuple[str, str], Any] = {}
        self.undefined: set = set()
        self.calls: List[Tuple[str, Any]] = []

    def set(self, name: str, key: Any, value: Any) -> None:
        self.values[_storage_key(name, key)] = value

    async def get_storage(self, *, name: str, key: Any, block: BlockHeader) -> StorageSnapshot:
        self.calls.append((name, key))
        if name in self.undefined:
            return StorageSnapshot(is_defined=False, spec_version=self.spec_version)
        return StorageSnapshot(spec_version=self.spec_version, value=self.values.get(_storage_key(name, key)))


class FakeEntityRepository(EntityRepository):
    """
    Persisted records per kind, as written by upsert_many.
    """

    def __init__(self) -> None:
        self.records: Dict[str, Dict[str, IndexedEntity]] = {}

    def seed(self, entity: IndexedEntity) -> None:
        self.records.setdefault(entity.kind(), {})[entity.id] = entity

    async def get_by_id(self, entity_type, entity_id):
        return self.records.get(entity_type.kind(), {}).get(entity_id)

    async def get_latest_cumulative(self, entity_type, scope_key, till_timestamp):
        matching = [
            e
            for e in self.records.get(entity_type.kind(), {}).values()
            if e.scope_key == scope_key and e.till_timestamp <= till_timestamp
        ]
        return max(matching, key=lambda e: e.till_timestamp) if matching else None

    async def find_market_by_lend_token(self, lend_token_id: int) -> Optional[LoanMarket]:
        for market in self.records.get(LoanMarket.kind(), {}).values():
            if market.lend_token_id == lend_token_id:
                return market
        return None

    async def upsert_many(self, kind: str, entities: Sequence[IndexedEntity]) -> int:
        for entity in entities:
            self.records.setdefault(kind, {})[entity.id] = entity
        return len(entities)


def token_id(name: str) -> Dict[str, Any]:
    return {"__kind": "Token", "value": {"__kind": name}}


def foreign_id(asset: int) -> Dict[str, Any]:
    return {"__kind": "ForeignAsset", "value": asset}


def lend_id(lend_token_id: int) -> Dict[str, Any]:
    return {"__kind": "LendToken", "value": lend_token_id}


def stable_lp_id(pool_id: int) -> Dict[str, Any]:
    return {"__kind": "StableLpToken", "value": pool_id}


def make_block(height: int = 100, timestamp: int = 1_700_000_000_000, events=None, spec_version: int = V1021000):
    return BlockHeader(
        height=height,
        timestamp=timestamp,
        spec_version=spec_version,
        events=list(events or []),
    )


def make_event(name: str, args: Any, *, event_id: str = "0000000100-000001", spec_version: int = V1021000):
    return RawEvent(id=event_id, name=name, spec_version=spec_version, args=args)


@pytest.fixture
def chain_state():
    return FakeChainState()


@pytest.fixture
def entity_repository():
    return FakeEntityRepository()


@pytest.fixture
def session(chain_state, entity_repository):
    return IndexingSession(chain_state=chain_state, entity_repository=entity_repository)


@pytest.fixture
def processor(session):
    return ProcessEventUseCase(session=session)
