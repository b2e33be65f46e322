# Copyright (c) Syntropy Systems
"""Shared Pydantic model helpers for tandem."""

from __future__ import annotations

from typing import ClassVar, Union

from pydantic import BaseModel, ConfigDict, JsonValue, TypeAdapter, ValidationError
from typing_extensions import TypeAlias

JSONPrimitive: TypeAlias = Union[str, int, float, bool, None]
JSONValue: TypeAlias = JsonValue
JSONObject: TypeAlias = dict[str, JSONValue]

_JSON_VALUE_ADAPTER: TypeAdapter[JSONValue] = TypeAdapter(JSONValue)


def json_safe(value: object) -> JSONValue:
    """Coerce a value into JSON data, falling back to its repr."""
    try:
        return _JSON_VALUE_ADAPTER.validate_python(value)
    except ValidationError:
        return repr(value)


class TandemBaseModel(BaseModel):
    """Base model with shared config for tandem schemas."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        populate_by_name=True,
    )
