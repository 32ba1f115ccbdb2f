# libs/step_common/validation.py
from __future__ import annotations

from typing import Callable, Generic, Iterable, NamedTuple, TypeVar, Union

from .result import OK, Ok, ValidationError

T = TypeVar("T")


class Check(NamedTuple):
    """``predicate`` returns True when the envelope passes."""

    predicate: Callable[..., bool]
    message: str


def non_empty(attr: str, message: str) -> Check:
    return Check(lambda e: bool(getattr(e, attr)), message)


class Validator(Generic[T]):
    """
    Ordered checks, evaluated lazily; the first failing check's message is
    returned as-is and the rest are never run.
    """

    def __init__(self, checks: Iterable[Check]):
        self.checks: tuple[Check, ...] = tuple(checks)

    def extend(self, checks: Iterable[Check]) -> "Validator[T]":
        return Validator([*self.checks, *checks])

    def validate(self, envelope: T) -> Union[Ok, ValidationError]:
        for check in self.checks:
            if not check.predicate(envelope):
                return ValidationError(check.message)
        return OK
