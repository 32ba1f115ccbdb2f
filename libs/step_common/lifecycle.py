# libs/step_common/lifecycle.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, List, Optional, TypeVar, Union

from . import correlation
from .bus import MessageBus
from .envelope import StepEnvelope, decode, encode
from .events import StepSubjects
from .executor import Executor
from .result import ActionError, DecodeError, Ok, ValidationError
from .validation import Validator

log = logging.getLogger("step_common.lifecycle")

E = TypeVar("E", bound=StepEnvelope)


class Stage(str, Enum):
    RECEIVED = "received"
    DECODED = "decoded"
    VALIDATED = "validated"
    EXECUTED = "executed"
    COMPLETED = "completed"
    FAILED = "failed"
    DROPPED = "dropped"


@dataclass
class StepResult(Generic[E]):
    trail: List[Stage] = field(default_factory=lambda: [Stage.RECEIVED])
    envelope: Optional[E] = None
    error: Optional[str] = None

    @property
    def stage(self) -> Stage:
        return self.trail[-1]

    def advance(self, stage: Stage) -> "StepResult[E]":
        self.trail.append(stage)
        return self


class StepController(Generic[E]):
    """
    Runs one workflow step for one inbound message:

        RECEIVED -> DECODED -> VALIDATED -> EXECUTED -> COMPLETED
            |           |           |
         DROPPED      FAILED      FAILED

    A payload that cannot be decoded is dropped without publishing anything.
    Every envelope that decodes is published exactly once, to the done
    subject on success or to the error subject with ``error`` set.

    Controllers hold no per-message state, so one instance may serve any
    number of concurrent ``handle`` calls.
    """

    def __init__(
        self,
        *,
        model: type[E],
        bus: MessageBus,
        validator: Validator,
        executor: Executor,
        subjects: StepSubjects,
        action_timeout: Optional[float] = None,
    ):
        self.model = model
        self.bus = bus
        self.validator = validator
        self.executor = executor
        self.subjects = subjects
        self.action_timeout = action_timeout

    async def handle(self, body: bytes) -> StepResult[E]:
        result: StepResult[E] = StepResult()

        decoded = decode(self.model, body)
        if isinstance(decoded, DecodeError):
            log.warning("dropping message on %s: %s", self.subjects.trigger, decoded.message)
            result.error = decoded.message
            return result.advance(Stage.DROPPED)

        envelope = decoded
        result.envelope = envelope
        result.advance(Stage.DECODED)
        correlation.bind(envelope.id, envelope.batch_id)
        log.info("received %s name=%s", self.subjects.trigger, getattr(envelope, "name", None))

        checked = self.validator.validate(envelope)
        if isinstance(checked, ValidationError):
            return await self._publish_failure(result, checked.message)
        result.advance(Stage.VALIDATED)

        done = await self._execute(envelope)
        if isinstance(done, ActionError):
            return await self._publish_failure(result, done.message)
        result.advance(Stage.EXECUTED)

        await self.complete(envelope)
        return result.advance(Stage.COMPLETED)

    async def _execute(self, envelope: E) -> Union[Ok, ActionError]:
        try:
            return await asyncio.wait_for(self.executor.execute(envelope), timeout=self.action_timeout)
        except asyncio.TimeoutError:
            if self.action_timeout is None:
                return ActionError("action timed out")
            return ActionError(f"action timed out after {self.action_timeout:g}s")
        except Exception as e:
            log.exception("executor raised instead of returning an ActionError")
            return ActionError(str(e) or type(e).__name__)

    async def _publish_failure(self, result: StepResult[E], message: str) -> StepResult[E]:
        await self.fail(result.envelope, message)
        result.error = message
        return result.advance(Stage.FAILED)

    async def complete(self, envelope: E) -> None:
        """Publish the envelope unchanged to the done subject."""
        await self.bus.publish(self.subjects.done, encode(envelope))
        log.info("completed -> %s", self.subjects.done)

    async def fail(self, envelope: E, message: str) -> None:
        """Attach ``message`` as the error text and publish to the error subject."""
        envelope.error = message
        await self.bus.publish(self.subjects.error, encode(envelope))
        log.warning("failed -> %s: %s", self.subjects.error, message)
