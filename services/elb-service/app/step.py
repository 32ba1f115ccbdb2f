# app/step.py
from __future__ import annotations

from step_common.bus import MessageBus
from step_common.executor import Executor
from step_common.lifecycle import StepController

from app.executors import executor_for
from app.models.elb import ELBEvent
from app.settings import Settings
from app.validation import validator_for


def build_controller(bus: MessageBus, cfg: Settings, executor: Executor | None = None) -> StepController[ELBEvent]:
    """Wire the ELB step described by ``cfg`` onto ``bus``."""
    if executor is None:
        executor = executor_for(cfg.STEP_ACTION, cfg.STEP_PROVIDER, max_attempts=cfg.AWS_MAX_ATTEMPTS)
    return StepController(
        model=ELBEvent,
        bus=bus,
        validator=validator_for(cfg.STEP_ACTION),
        executor=executor,
        subjects=cfg.subjects,
        action_timeout=cfg.ACTION_TIMEOUT_SECONDS,
    )
