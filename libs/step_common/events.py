# libs/step_common/events.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# Canonical exchange shared by every workflow step
EXCHANGE = "workflow.events"


class Action(str, Enum):
    CREATE = "create"
    DELETE = "delete"


class Outcome(str, Enum):
    DONE = "done"
    ERROR = "error"


def subject(resource: str, action: Action | str, provider: str) -> str:
    """
    Build the trigger subject for one step:
        <resource>.<action>.<provider>

    Examples:
        subject("elb", Action.DELETE, "aws") -> "elb.delete.aws"
    """
    act = action.value if isinstance(action, Action) else str(action)
    return f"{resource}.{act}.{provider}"


def outcome_subject(trigger: str, outcome: Outcome | str) -> str:
    out = outcome.value if isinstance(outcome, Outcome) else str(outcome)
    return f"{trigger}.{out}"


@dataclass(frozen=True)
class StepSubjects:
    trigger: str
    done: str
    error: str

    @classmethod
    def for_step(cls, resource: str, action: Action | str, provider: str) -> "StepSubjects":
        trigger = subject(resource, action, provider)
        return cls(
            trigger=trigger,
            done=outcome_subject(trigger, Outcome.DONE),
            error=outcome_subject(trigger, Outcome.ERROR),
        )
