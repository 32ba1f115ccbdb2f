# app/consumer.py
from __future__ import annotations

import asyncio
from typing import Set

from aio_pika.abc import AbstractIncomingMessage

from step_common.lifecycle import StepController

from app.events.rabbit import RabbitBus
from app.logger import logger


class StepConsumer:
    """
    Feeds deliveries from the trigger queue into the controller, one task
    per message. A message is acked once its invocation reaches a terminal
    state and requeued if the invocation crashes or is cut short.
    """

    def __init__(self, *, bus: RabbitBus, controller: StepController, queue_name: str):
        self.bus = bus
        self.controller = controller
        self.queue_name = queue_name
        self._tasks: Set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def start(self) -> None:
        await self.bus.consume(self.controller.subjects.trigger, self.queue_name, self.on_message)
        logger.info("Consuming %s on '%s'", self.controller.subjects.trigger, self.queue_name)

    async def on_message(self, message: AbstractIncomingMessage) -> None:
        task = asyncio.create_task(self._process(message))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    async def _process(self, message: AbstractIncomingMessage) -> None:
        async with message.process(requeue=True, ignore_processed=True):
            result = await self.controller.handle(message.body)
            logger.debug("message finished stage=%s", result.stage.value)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Step invocation crashed; message requeued", exc_info=exc)

    async def stop(self, grace: float) -> None:
        """Stop taking new messages and let in-flight ones finish within ``grace`` seconds."""
        await self.bus.cancel()
        if not self._tasks:
            return
        logger.info("Waiting up to %.1fs for %d in-flight message(s)", grace, len(self._tasks))
        _, pending = await asyncio.wait(set(self._tasks), timeout=grace)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning("Abandoned %d in-flight message(s) after grace period; they will be redelivered", len(pending))
            await asyncio.gather(*pending, return_exceptions=True)
