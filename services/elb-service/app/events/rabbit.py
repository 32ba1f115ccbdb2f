# app/events/rabbit.py
from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable, Optional

import aio_pika
from aio_pika.abc import AbstractChannel, AbstractExchange, AbstractIncomingMessage, AbstractQueue

from app.logger import logger

MessageCallback = Callable[[AbstractIncomingMessage], Awaitable[None]]


def _exchange_type(name: str) -> aio_pika.ExchangeType:
    """Map a configured name (`topic`, `direct`, ...) onto the aio-pika enum; unknown names raise."""
    return aio_pika.ExchangeType((name or "topic").lower())


class RabbitBus:
    """
    Explicitly constructed RabbitMQ client handed to whoever needs the bus.
    Subjects map one-to-one onto routing keys of a single exchange.
    """

    def __init__(
        self,
        url: str,
        exchange: str,
        *,
        exchange_type: str = "topic",
        connection_name: Optional[str] = None,
    ):
        self.url = url
        self.exchange_name = exchange
        self.exchange_type = exchange_type
        self.connection_name = connection_name
        self._stop_event = asyncio.Event()
        self._connection: Optional[aio_pika.abc.AbstractRobustConnection] = None
        self._channel: Optional[AbstractChannel] = None
        self._exchange: Optional[AbstractExchange] = None
        self._queue: Optional[AbstractQueue] = None
        self._consumer_tag: Optional[str] = None

    async def connect(self, *, prefetch: int = 16) -> None:
        """
        Connect and declare the exchange.
        Retries with jittered backoff until successful or close() is called.
        """
        attempt = 0
        while not self._stop_event.is_set():
            try:
                logger.info("Connecting to RabbitMQ ...")
                self._connection = await aio_pika.connect_robust(
                    self.url,
                    timeout=15,
                    client_properties={"connection_name": self.connection_name or "step"},
                )
                self._channel = await self._connection.channel(publisher_confirms=False)
                await self._channel.set_qos(prefetch_count=prefetch)
                self._exchange = await self._channel.declare_exchange(
                    self.exchange_name,
                    _exchange_type(self.exchange_type),
                    durable=True,
                )
                logger.info("RabbitMQ connection ready")
                return
            except Exception as e:
                attempt += 1
                wait = min(30, 1 + attempt * 1.5) + random.uniform(0, 0.75)
                logger.exception("RabbitMQ connect failed (attempt %d): %s. Retrying in %.1fs ...", attempt, e, wait)
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=wait)
                except asyncio.TimeoutError:
                    continue

    async def publish(self, subject: str, body: bytes) -> None:
        """Fire-and-forget: no broker confirmation is awaited."""
        if self._exchange is None:
            raise RuntimeError("RabbitBus.publish called before connect()")
        msg = aio_pika.Message(body, content_type="application/json", delivery_mode=aio_pika.DeliveryMode.PERSISTENT)
        await self._exchange.publish(msg, routing_key=subject)

    async def consume(self, subject: str, queue_name: str, callback: MessageCallback) -> None:
        """Bind a durable queue to ``subject`` and start delivering to ``callback``."""
        if self._channel is None or self._exchange is None:
            raise RuntimeError("RabbitBus.consume called before connect()")
        self._queue = await self._channel.declare_queue(queue_name, durable=True)
        await self._queue.bind(self._exchange, routing_key=subject)
        logger.info("Bound queue '%s' to '%s' with '%s'", self._queue.name, self.exchange_name, subject)
        self._consumer_tag = await self._queue.consume(callback, no_ack=False)

    async def cancel(self) -> None:
        """Stop receiving new deliveries; publishing keeps working."""
        if self._queue is not None and self._consumer_tag is not None:
            await self._queue.cancel(self._consumer_tag)
            self._consumer_tag = None

    async def close(self) -> None:
        self._stop_event.set()
        try:
            if self._channel and not self._channel.is_closed:
                await self._channel.close()
        except Exception as e:
            logger.warning("Error closing channel: %s", e)

        try:
            if self._connection and not self._connection.is_closed:
                await self._connection.close()
        except Exception as e:
            logger.warning("Error closing connection: %s", e)

        self._exchange = None
        logger.info("RabbitMQ connection closed")
