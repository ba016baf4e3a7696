from __future__ import annotations

import asyncio
from uuid import UUID

from dynamic_secrets.core.config import settings
from dynamic_secrets.core.logging import logger
from dynamic_secrets.tasks.dynamic_secret import prune_dynamic_secret_task


class CeleryPruningScheduler:
    """Hands prune commands to the Celery ``dynamic_secret`` queue."""

    def __init__(self, countdown: int | None = None, queue: str | None = None) -> None:
        self.countdown = settings.DYNAMIC_SECRET_PRUNE_COUNTDOWN_SECONDS if countdown is None else countdown
        self.queue = queue or settings.DYNAMIC_SECRET_PRUNE_QUEUE

    async def prune_dynamic_secret(self, config_id: UUID) -> None:
        # broker publish is blocking I/O
        async_result = await asyncio.to_thread(
            prune_dynamic_secret_task.apply_async,
            args=[str(config_id)],
            countdown=self.countdown,
            queue=self.queue,
        )
        logger.info("dynamic_secret_prune_enqueued id={} task_id={}", config_id, async_result.id)
