from __future__ import annotations

import logging
from typing import Any, Optional

from core.domain.entities.block_entity import RawEvent
from core.services.event_decoder_service import event_decoders
from core.services.indexing_session import IndexingSession


class EventUseCase:
    """
    Shared plumbing for event handlers: session access and versioned decoding.

    Handlers return True when they staged records and False when the event was
    skipped (unknown version, missing upstream state). Anything else is raised.
    """

    def __init__(self, *, session: IndexingSession, logger: logging.Logger | None = None) -> None:
        self._session = session
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    def _decode(self, event: RawEvent) -> Optional[Any]:
        return event_decoders.decode(
            event.name,
            event.spec_version,
            event.args,
            strict=self._session.strict_event_versions,
        )
