# libs/step_common/executor.py
from __future__ import annotations

from typing import Any, Protocol, Union

from .result import ActionError, Ok


class Executor(Protocol):
    """
    The single side effect a step exists to perform.

    Implementations must report every failure as ``ActionError`` carrying a
    readable cause. They are called at most once per envelope and never retry
    on their own.
    """

    async def execute(self, envelope: Any) -> Union[Ok, ActionError]: ...
