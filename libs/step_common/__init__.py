from .bus import InMemoryBus, MessageBus
from .envelope import StepEnvelope, WireModel, decode, encode
from .events import Action, StepSubjects
from .executor import Executor
from .lifecycle import Stage, StepController, StepResult
from .result import OK, ActionError, DecodeError, Ok, ValidationError
from .validation import Check, Validator, non_empty

__all__ = [
    "OK",
    "Action",
    "ActionError",
    "Check",
    "DecodeError",
    "Executor",
    "InMemoryBus",
    "MessageBus",
    "Ok",
    "Stage",
    "StepController",
    "StepEnvelope",
    "StepResult",
    "StepSubjects",
    "ValidationError",
    "Validator",
    "WireModel",
    "decode",
    "encode",
    "non_empty",
]
