# libs/step_common/envelope.py
from __future__ import annotations

from typing import Any, Optional, TypeVar, Union

import orjson
from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError as ModelError, model_validator

from .result import DecodeError


class WireModel(BaseModel):
    """
    Base for anything carried on the bus.
    Unknown keys are ignored; missing keys and explicit nulls fall back to the
    field default so that an absent value is only rejected by validation.
    Fields use the pydantic ``Strict*`` types: a value of the wrong JSON type
    is a decode failure, never coerced.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _nulls_to_defaults(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class StepEnvelope(WireModel):
    """Correlation and bookkeeping fields shared by every step's event."""

    id: StrictStr = Field(default="", alias="_uuid")            # operation id, echoed verbatim
    batch_id: StrictStr = Field(default="", alias="_batch_id")  # echoed verbatim
    provider_type: StrictStr = Field(default="", alias="_type")
    error: Optional[StrictStr] = None                           # set on the failure path only


E = TypeVar("E", bound=StepEnvelope)


def decode(model: type[E], body: Union[bytes, str]) -> Union[E, DecodeError]:
    """
    Build ``model`` from a JSON body. An ``error`` key on the inbound message
    is discarded: error text is only ever attached by this step's own failure.
    """
    try:
        data = orjson.loads(body)
    except orjson.JSONDecodeError as e:
        return DecodeError(f"malformed payload: {e}")
    if not isinstance(data, dict):
        return DecodeError(f"expected a JSON object, got {type(data).__name__}")
    data.pop("error", None)
    try:
        return model.model_validate(data)
    except ModelError as e:
        return DecodeError(f"payload does not match {model.__name__}: {e.error_count()} error(s)")


def encode(envelope: StepEnvelope) -> bytes:
    """
    Compact JSON in field declaration order, wire aliases as keys, unset
    optionals omitted and ``error`` always last.
    """
    data = envelope.model_dump(by_alias=True, exclude_none=True)
    err = data.pop("error", None)
    if err is not None:
        data["error"] = err
    return orjson.dumps(data)
