# core/domain/entities/block_entity.py
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Height(BaseModel):
    """
    Denormalized height embedded in every emitted record.

    absolute: raw parachain block height.
    active: height counted only over blocks in which the parachain was producing
            (provided by the external height bookkeeping).
    """

    absolute: int
    active: int


class RawEvent(BaseModel):
    """
    An already-parsed chain event as delivered by the block/event source.

    name is "<Pallet>.<Event>", e.g. "Loans.Borrowed".
    args is either a positional list (older encodings) or a named dict.
    """

    id: str
    name: str
    spec_version: int
    args: Any = None

    model_config = ConfigDict(frozen=True)


class BlockHeader(BaseModel):
    """
    Block context for a batch of events.

    timestamp is unix epoch in milliseconds.
    """

    height: int
    timestamp: int
    spec_version: int
    hash: Optional[str] = None

    events: List[RawEvent] = Field(default_factory=list)


class StorageSnapshot(BaseModel):
    """
    Result of one authoritative storage read.

    is_defined is false when the storage item does not exist at this runtime.
    value is None when the key has no entry.
    """

    is_defined: bool = True
    spec_version: int
    value: Any = None
