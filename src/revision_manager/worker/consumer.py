"""Base consumer class for Redis Stream consumer workers.

Provides the XREADGROUP lifecycle loop: create group, drain pending
entries, read new messages, process, acknowledge. Subclasses override
``process_message`` with their specific logic.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from redis.asyncio import Redis

log = structlog.get_logger(__name__)


def _decode(value: Any) -> str:
    return value.decode() if isinstance(value, bytes) else str(value)


class BaseConsumer:
    """Base class for Redis Stream consumer workers.

    A message is XACKed only after ``process_message`` returns. On failure
    it stays in the Pending Entries List (PEL). The PEL is drained at startup
    and again whenever a read times out with no new messages while failed
    entries are outstanding, so the block timeout doubles as the retry delay.
    """

    def __init__(
        self,
        redis_client: Redis,
        group_name: str,
        consumer_name: str,
        stream_key: str,
        batch_size: int = 10,
        block_timeout_ms: int = 5000,
    ) -> None:
        self._redis = redis_client
        self._group_name = group_name
        self._consumer_name = consumer_name
        self._stream_key = stream_key
        self._batch_size = batch_size
        self._block_timeout_ms = block_timeout_ms
        self._stopped = False

    async def ensure_group(self) -> None:
        """Create the consumer group if it does not already exist.

        Uses ``XGROUP CREATE ... MKSTREAM`` starting at ID ``0`` so triggers
        published before the group existed are still delivered.
        """
        try:
            await self._redis.xgroup_create(
                name=self._stream_key,
                groupname=self._group_name,
                id="0",
                mkstream=True,
            )
            log.info(
                "consumer_group_created",
                group=self._group_name,
                stream=self._stream_key,
            )
        except Exception as exc:  # noqa: BLE001
            # BUSYGROUP means group already exists
            if "BUSYGROUP" in str(exc):
                log.debug(
                    "consumer_group_exists",
                    group=self._group_name,
                    stream=self._stream_key,
                )
            else:
                raise

    async def _read(self, stream_id: str, block: int) -> list[Any]:
        return await self._redis.xreadgroup(  # type: ignore[no-any-return]
            groupname=self._group_name,
            consumername=self._consumer_name,
            streams={self._stream_key: stream_id},
            count=self._batch_size,
            block=block,
        )

    async def _handle(self, messages: list[Any]) -> int:
        """Process and ACK every entry in an XREADGROUP reply.

        Returns the number of entries that failed and remain pending.
        """
        failed = 0
        for _stream_name, entries in messages:
            for entry_id_raw, data in entries:
                entry_id = _decode(entry_id_raw)
                decoded_data = {_decode(k): _decode(v) for k, v in data.items()}
                try:
                    await self.process_message(entry_id, decoded_data)
                    await self._redis.xack(self._stream_key, self._group_name, entry_id)
                except Exception:
                    # Entry stays in the PEL for redelivery
                    failed += 1
                    log.exception(
                        "message_processing_failed",
                        entry_id=entry_id,
                        group=self._group_name,
                        consumer=self._consumer_name,
                    )
        return failed

    async def drain_pending(self) -> int:
        """Reprocess entries delivered to this consumer but never ACKed.

        Reads the PEL once from the start. Entries that fail again remain
        pending until the next drain. Returns the number that failed.
        """
        failed = 0
        last_id = "0"
        while not self._stopped:
            pending = await self._read(last_id, block=0)
            if not pending or not any(entries for _, entries in pending):
                break
            failed += await self._handle(pending)
            last_id = _decode(pending[-1][1][-1][0])

        log.info("pending_drain_completed", group=self._group_name, failed=failed)
        return failed

    async def run(self) -> None:
        """Main consumer loop. Runs until ``stop()`` is called."""
        await self.ensure_group()
        log.info(
            "consumer_started",
            group=self._group_name,
            consumer=self._consumer_name,
            stream=self._stream_key,
        )

        pending_failures = await self.drain_pending()

        while not self._stopped:
            messages = await self._read(">", block=self._block_timeout_ms)
            if messages:
                pending_failures += await self._handle(messages)
            elif pending_failures and not self._stopped:
                # Idle: retry entries that failed earlier
                pending_failures = await self.drain_pending()

        log.info(
            "consumer_stopped",
            group=self._group_name,
            consumer=self._consumer_name,
        )

    async def process_message(self, entry_id: str, data: dict[str, str]) -> None:
        """Process a single stream message. Override in subclasses."""
        raise NotImplementedError

    def stop(self) -> None:
        """Signal the consumer loop to stop gracefully."""
        self._stopped = True
