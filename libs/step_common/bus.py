# libs/step_common/bus.py
from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Dict, List, Protocol, Tuple


class MessageBus(Protocol):
    """Publishing side of the bus, the only part a controller needs."""

    async def publish(self, subject: str, body: bytes) -> None: ...


class InMemoryBus:
    """
    Process-local bus for tests and local runs.
    Every published body is recorded and fanned out to the queues returned
    by ``subscribe`` for the same subject.
    """

    def __init__(self) -> None:
        self.published: List[Tuple[str, bytes]] = []
        self._queues: Dict[str, List[asyncio.Queue]] = defaultdict(list)

    def subscribe(self, subject: str) -> asyncio.Queue:
        q: asyncio.Queue = asyncio.Queue()
        self._queues[subject].append(q)
        return q

    async def publish(self, subject: str, body: bytes) -> None:
        self.published.append((subject, body))
        for q in self._queues.get(subject, []):
            q.put_nowait(body)

    def bodies(self, subject: str) -> List[bytes]:
        return [b for s, b in self.published if s == subject]


async def wait_msg(queue: asyncio.Queue, timeout: float = 0.1) -> bytes | None:
    """Next body on ``queue``, or None once ``timeout`` seconds pass."""
    try:
        return await asyncio.wait_for(queue.get(), timeout=timeout)
    except asyncio.TimeoutError:
        return None
