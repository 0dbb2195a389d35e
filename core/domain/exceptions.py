"""
Error taxonomy of the indexing engine.

Handlers skip (with a warning) on missing upstream state and unrecognized
versions; schema drift and broken input invariants propagate to the event
dispatcher, which isolates them to the failing event.
"""

from __future__ import annotations

from typing import Any


class IndexerError(Exception):
    """Base class for all indexer errors."""


class UnknownAssetVariant(IndexerError):
    def __init__(self, value: Any, *, context: str = "currency") -> None:
        super().__init__(f"Unknown {context} variant: {value!r}")
        self.value = value


class UnknownSpecVersion(IndexerError):
    def __init__(self, name: str, spec_version: int) -> None:
        super().__init__(f"No decoding rule for {name} at spec version {spec_version}")
        self.name = name
        self.spec_version = spec_version


class EventSchemaViolation(IndexerError):
    """A payload matched a rule's version but not the rule's shape."""


class StorageVersionUnsupported(IndexerError):
    """Storage is not defined, or has no decoding rule, at the block's spec version."""


class PoolNotFound(IndexerError):
    def __init__(self, pool_id: int) -> None:
        super().__init__(f"Unable to find stable pool in storage for given poolId [{pool_id}]")
        self.pool_id = pool_id


class PoolTypeUnsupported(IndexerError):
    def __init__(self, pool_id: int, kind: Any) -> None:
        super().__init__(
            f"Found pool for given poolId [{pool_id}], but it is an unexpected pool type [{kind}]"
        )
        self.pool_id = pool_id
        self.kind = kind


class AssetIndexOutOfRange(IndexerError):
    def __init__(self, pool_id: int, index: int, size: int) -> None:
        super().__init__(
            f"Unable to find currency for poolId [{pool_id}] and currency index [{index}] "
            f"(pool has {size} currencies)"
        )
        self.pool_id = pool_id
        self.index = index
        self.size = size


class SwapAmountsMismatch(IndexerError):
    """Currencies and balances of a swap path have different lengths."""


class UnexpectedCurrencyType(IndexerError):
    """A currency that cannot be pooled showed up in a swap."""
