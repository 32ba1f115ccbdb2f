from __future__ import annotations

from step_common.events import Action
from step_common.executor import Executor

from .aws import AwsElbCreator, AwsElbDeleter, elb_client

# (action, provider) -> executor class
REGISTRY = {
    (Action.CREATE, "aws"): AwsElbCreator,
    (Action.DELETE, "aws"): AwsElbDeleter,
}


def executor_for(action: Action, provider: str, **kwargs) -> Executor:
    try:
        cls = REGISTRY[(Action(action), provider)]
    except KeyError:
        raise ValueError(f"no executor for elb.{Action(action).value}.{provider}") from None
    return cls(**kwargs)


__all__ = [
    "AwsElbCreator",
    "AwsElbDeleter",
    "REGISTRY",
    "elb_client",
    "executor_for",
]
