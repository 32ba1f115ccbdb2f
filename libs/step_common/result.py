# libs/step_common/result.py
"""
Tagged outcomes threaded through the step stages.

Each stage returns either ``OK`` or one of the error records below; nothing
in the lifecycle raises to signal a step failure.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Ok:
    pass


OK = Ok()


@dataclass(frozen=True)
class DecodeError:
    """Inbound payload could not be turned into an envelope."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ValidationError:
    """A field-level defect; ``message`` is the canonical check text."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ActionError:
    """The external action failed or timed out; ``message`` is the cause."""

    message: str

    def __str__(self) -> str:
        return self.message

