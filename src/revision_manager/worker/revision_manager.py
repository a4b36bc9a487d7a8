"""Revision manager worker.

Consumes Certificate and CertificateRequest change triggers, maps each to
the owning Certificate's key and runs a pruning pass for it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from revision_manager.domain.triggers import keys_for_trigger
from revision_manager.worker.consumer import BaseConsumer

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from revision_manager.settings import Settings
    from revision_manager.worker.reconciler import Reconciler

log = structlog.get_logger(__name__)


class RevisionManagerConsumer(BaseConsumer):
    """Runs the reconciler for every Certificate a trigger touches.

    Duplicate triggers for the same Certificate are harmless: each pass
    recomputes from current state and a second pass deletes nothing.
    """

    def __init__(
        self,
        redis_client: Redis,
        reconciler: Reconciler,
        settings: Settings,
    ) -> None:
        super().__init__(
            redis_client=redis_client,
            group_name=settings.redis.group_revision_manager,
            consumer_name=settings.controller.consumer_name,
            stream_key=settings.redis.trigger_stream,
            batch_size=settings.redis.batch_size,
            block_timeout_ms=settings.redis.block_timeout_ms,
        )
        self._reconciler = reconciler

    async def process_message(self, entry_id: str, data: dict[str, str]) -> None:
        keys = keys_for_trigger(data)
        if not keys:
            log.debug("trigger_ignored", entry_id=entry_id, kind=data.get("kind"))
            return

        for key in keys:
            deleted = await self._reconciler.process_item(key)
            if deleted:
                log.info(
                    "revisions_pruned",
                    entry_id=entry_id,
                    key=key,
                    deleted=deleted,
                )
