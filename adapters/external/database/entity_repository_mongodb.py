from __future__ import annotations

import re
from typing import Optional, Sequence, Type, TypeVar

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, UpdateOne

from core.domain.entities.base_entity import IndexedEntity
from core.domain.entities.dex_entity import (
    CumulativeDexTradeCount,
    CumulativeDexTradeCountPerAccount,
    CumulativeDexTradingVolume,
    CumulativeDexTradingVolumePerAccount,
    CumulativeDexTradingVolumePerPool,
    CumulativeEntity,
    Swap,
)
from core.domain.entities.loan_entity import LoanMarket
from core.repositories.entity_repository import EntityRepository

E = TypeVar("E", bound=IndexedEntity)
C = TypeVar("C", bound=CumulativeEntity)

CUMULATIVE_KINDS = (
    CumulativeDexTradingVolume,
    CumulativeDexTradingVolumePerAccount,
    CumulativeDexTradingVolumePerPool,
    CumulativeDexTradeCount,
    CumulativeDexTradeCountPerAccount,
)


def collection_name(kind: str) -> str:
    """
    LoanMarketActivation -> loan_market_activation
    """
    return re.sub(r"(?<!^)(?=[A-Z])", "_", kind).lower()


class EntityRepositoryMongoDB(EntityRepository):
    """
    MongoDB persistence for emitted records.

    One collection per record kind, documents keyed by the record id (`_id`).
    Flushes are idempotent: replaying a batch rewrites the same documents.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Args:
            db: Motor database handle.
        """
        self._db = db

    def _col(self, kind: str):
        return self._db[collection_name(kind)]

    async def ensure_indexes(self) -> None:
        """
        Latest-snapshot lookups per scope, market lookups by lend token and
        swap listings per pool.
        """
        for entity_type in CUMULATIVE_KINDS:
            await self._col(entity_type.kind()).create_index([("scope_key", 1), ("till_timestamp", -1)])

        await self._col(LoanMarket.kind()).create_index([("lend_token_id", 1)])
        await self._col(Swap.kind()).create_index([("pool_type", 1), ("pool_id", 1), ("timestamp", -1)])

    async def get_by_id(self, entity_type: Type[E], entity_id: str) -> Optional[E]:
        doc = await self._col(entity_type.kind()).find_one({"_id": entity_id})
        return entity_type.from_mongo(doc) if doc else None

    async def get_latest_cumulative(
        self,
        entity_type: Type[C],
        scope_key: str,
        till_timestamp: int,
    ) -> Optional[C]:
        doc = await self._col(entity_type.kind()).find_one(
            {"scope_key": scope_key, "till_timestamp": {"$lte": int(till_timestamp)}},
            sort=[("till_timestamp", DESCENDING)],
        )
        return entity_type.from_mongo(doc) if doc else None

    async def find_market_by_lend_token(self, lend_token_id: int) -> Optional[LoanMarket]:
        doc = await self._col(LoanMarket.kind()).find_one(
            {"lend_token_id": int(lend_token_id)},
            sort=[("timestamp", DESCENDING)],
        )
        return LoanMarket.from_mongo(doc) if doc else None

    async def upsert_many(self, kind: str, entities: Sequence[IndexedEntity]) -> int:
        if not entities:
            return 0

        ops = []
        for entity in entities:
            payload = entity.to_mongo()
            key = {"_id": payload.pop("_id")}
            ops.append(UpdateOne(key, {"$set": payload}, upsert=True))

        result = await self._col(kind).bulk_write(ops, ordered=True)
        return int(result.upserted_count + result.matched_count)
