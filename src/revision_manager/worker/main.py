"""Worker process entry point.

Run with ``revision-manager-worker`` or ``python -m revision_manager.worker.main``.
"""

from __future__ import annotations

import asyncio
import signal

import structlog

from revision_manager.adapters.redis.store import RedisCertificateStore
from revision_manager.log_config import configure_logging
from revision_manager.settings import Settings
from revision_manager.worker.reconciler import Reconciler
from revision_manager.worker.revision_manager import RevisionManagerConsumer

log = structlog.get_logger(__name__)


async def main(settings: Settings | None = None) -> None:
    """Start the revision manager consumer and run until signalled."""
    if settings is None:
        settings = Settings()
    configure_logging(settings.log_level, json=settings.log_json)

    store = await RedisCertificateStore.create(settings.redis)
    consumer = RevisionManagerConsumer(
        redis_client=store.client,
        reconciler=Reconciler(store),
        settings=settings,
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, consumer.stop)

    log.info("worker_started", app=settings.app_name)
    try:
        await consumer.run()
    finally:
        await store.close()
        log.info("worker_stopped")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
