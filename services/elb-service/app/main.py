# app/main.py
from __future__ import annotations

import asyncio
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from app.consumer import StepConsumer
from app.events.rabbit import RabbitBus
from app.logger import logger, setup_logging
from app.settings import settings
from app.step import build_controller

setup_logging()

app = FastAPI(
    title=f"{settings.SERVICE_NAME} ({settings.subjects.trigger})",
    version="1.0.0",
    default_response_class=ORJSONResponse,
)

_start_task: Optional[asyncio.Task] = None


@app.get("/health")
async def health():
    consumer: Optional[StepConsumer] = getattr(app.state, "consumer", None)
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "env": settings.ENV,
        "subject": settings.subjects.trigger,
        "in_flight": consumer.in_flight if consumer else 0,
    }


async def _start(bus: RabbitBus, consumer: StepConsumer) -> None:
    await bus.connect(prefetch=settings.RABBITMQ_PREFETCH)
    await consumer.start()


@app.on_event("startup")
async def on_startup():
    global _start_task
    logger.info("Starting %s for %s ...", settings.SERVICE_NAME, settings.subjects.trigger)
    bus = RabbitBus(
        settings.RABBITMQ_URL,
        settings.RABBITMQ_EXCHANGE,
        exchange_type=settings.RABBITMQ_EXCHANGE_TYPE,
        connection_name=settings.SERVICE_NAME,
    )
    consumer = StepConsumer(bus=bus, controller=build_controller(bus, settings), queue_name=settings.queue_name)
    app.state.bus = bus
    app.state.consumer = consumer
    # Connecting retries in the background so the health endpoint is up meanwhile
    _start_task = asyncio.create_task(_start(bus, consumer))


@app.on_event("shutdown")
async def on_shutdown():
    logger.info("Shutting down %s ...", settings.SERVICE_NAME)
    if _start_task and not _start_task.done():
        _start_task.cancel()
        await asyncio.gather(_start_task, return_exceptions=True)
    consumer: Optional[StepConsumer] = getattr(app.state, "consumer", None)
    bus: Optional[RabbitBus] = getattr(app.state, "bus", None)
    if consumer:
        await consumer.stop(settings.SHUTDOWN_GRACE_SECONDS)
    if bus:
        await bus.close()
    logger.info("Shutdown complete")


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.PORT,
    )
