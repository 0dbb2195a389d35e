# workers/indexing_supervisor.py
from __future__ import annotations

import logging
from typing import Mapping, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from adapters.external.database.entity_repository_mongodb import EntityRepositoryMongoDB
from adapters.external.database.mongodb_client import get_mongo_client
from config.settings import settings
from core.domain.entities.block_entity import BlockHeader
from core.repositories.block_source_repository import BlockSourceRepository
from core.repositories.chain_state_repository import ChainStateRepository
from core.repositories.entity_repository import EntityRepository
from core.repositories.height_repository import HeightRepository
from core.services.indexing_session import IndexingSession
from core.usecases.process_event_use_case import BatchResult, ProcessEventUseCase


def setup_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


class IndexingSupervisor:
    """
    High-level supervisor for dex-lending-indexer.

    Responsibilities:
    - Connect to MongoDB and ensure indexes (unless a repository is injected).
    - Feed blocks from the block source through the event processor, in order.
    - Flush staged records to the sink every FLUSH_EVERY_BLOCKS blocks and at the end.
    """

    def __init__(
        self,
        *,
        chain_state: ChainStateRepository,
        block_source: BlockSourceRepository,
        heights: Optional[HeightRepository] = None,
        entity_repository: Optional[EntityRepository] = None,
        flush_every_blocks: int = settings.FLUSH_EVERY_BLOCKS,
        foreign_asset_symbols: Mapping[int, str] = settings.FOREIGN_ASSET_SYMBOLS,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger or logging.getLogger(self.__class__.__name__)
        self._chain_state = chain_state
        self._block_source = block_source
        self._heights = heights
        self._entity_repository = entity_repository
        self._flush_every_blocks = max(1, int(flush_every_blocks))
        self._foreign_asset_symbols = dict(foreign_asset_symbols)

        self._mongo_client: AsyncIOMotorClient | None = None
        self._db: AsyncIOMotorDatabase | None = None
        self._session: IndexingSession | None = None
        self._processor: ProcessEventUseCase | None = None

    @property
    def session(self) -> IndexingSession | None:
        return self._session

    async def start(self) -> None:
        """
        Initialize the sink and build the processing session.
        """
        if self._entity_repository is None:
            self._mongo_client = get_mongo_client()
            self._db = self._mongo_client[settings.MONGODB_DB_NAME]
            repo = EntityRepositoryMongoDB(self._db)
            await repo.ensure_indexes()
            self._entity_repository = repo

        self._session = IndexingSession(
            chain_state=self._chain_state,
            entity_repository=self._entity_repository,
            heights=self._heights,
            default_exchange_rate=settings.DEFAULT_EXCHANGE_RATE,
            strict_event_versions=settings.STRICT_EVENT_VERSIONS,
            foreign_asset_symbols=self._foreign_asset_symbols,
        )
        self._processor = ProcessEventUseCase(session=self._session)
        self._logger.info(
            "Indexer ready. db=%s strict_event_versions=%s flush_every_blocks=%s",
            settings.MONGODB_DB_NAME,
            settings.STRICT_EVENT_VERSIONS,
            self._flush_every_blocks,
        )

    async def run(self) -> BatchResult:
        """
        Process every block of the source. Returns the accumulated counts.
        """
        if self._processor is None:
            await self.start()

        total = BatchResult()
        pending_blocks = 0
        last_block: BlockHeader | None = None

        async for block in self._block_source.blocks():
            result = await self._processor.process_block(block)
            total.processed += result.processed
            total.skipped += result.skipped
            total.failed += result.failed
            total.failed_event_ids.extend(result.failed_event_ids)

            last_block = block
            pending_blocks += 1
            if pending_blocks >= self._flush_every_blocks:
                await self.flush(last_block)
                pending_blocks = 0

        if pending_blocks:
            await self.flush(last_block)

        self._logger.info(
            "Indexing finished. processed=%s skipped=%s failed=%s",
            total.processed,
            total.skipped,
            total.failed,
        )
        return total

    async def flush(self, block: BlockHeader | None = None) -> int:
        """
        Persist every staged record kind by kind, then clear the buffer.

        When a write fails the buffer keeps everything; upserts are keyed by id,
        so the next flush rewrites the kinds that already made it.
        """
        buffer = self._session.buffer
        staged = buffer.pending()
        written = 0
        try:
            for kind, entities in staged.items():
                written += await self._entity_repository.upsert_many(kind, entities)
        except Exception:
            self._logger.exception("Flush failed; keeping %s staged records for the next attempt", len(buffer))
            raise
        buffer.clear()

        self._logger.info(
            "Flushed %s records (%s kinds) up to height=%s",
            written,
            len(staged),
            block.height if block is not None else None,
        )
        return written

    async def stop(self) -> None:
        """
        Close the Mongo client if this supervisor opened it.
        """
        if self._mongo_client:
            self._mongo_client.close()
            self._mongo_client = None
