"""Rule payload decoding.

Rule payloads arrive as opaque blobs from the policy store. Each advisor
declares the pydantic model its payload must satisfy; decode_payload()
validates the blob and converts failures into InvalidConfigError.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import InvalidConfigError

if TYPE_CHECKING:
    from .rule import Rule

P = TypeVar("P", bound=BaseModel)


class EmptyPayload(BaseModel):
    """Payload for rules without configuration. Any content is ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class NumberPayload(BaseModel):
    """A single numeric threshold."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(description="Threshold; values <= 0 disable the check")


class NamingPayload(BaseModel):
    """A naming convention: a regular expression and a length limit."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    format: str = Field(description="Regular expression names must match")
    max_length: int = Field(default=64, ge=1, alias="maxLength")

    @field_validator("format")
    @classmethod
    def validate_format(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regular expression: {e}") from e
        return value


class StringArrayPayload(BaseModel):
    """A list of strings, e.g. disallowed column types."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    values: tuple[str, ...] = Field(default=(), alias="list")


def decode_payload(model: type[P], rule: Rule) -> P:
    """Validate a rule's payload against a payload model.

    Args:
        model: The pydantic model the payload must satisfy.
        rule: The rule whose payload is decoded.

    Returns:
        The validated payload.

    Raises:
        InvalidConfigError: If the payload is malformed.
    """
    raw = rule.payload
    try:
        if raw is None or (isinstance(raw, (str, bytes)) and not raw.strip()):
            return model.model_validate({})
        if isinstance(raw, (str, bytes)):
            return model.model_validate_json(raw)
        if isinstance(raw, Mapping):
            return model.model_validate(dict(raw))
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = " -> ".join(str(x) for x in error["loc"]) or "payload"
            errors.append(f"{loc}: {error['msg']}")
        raise InvalidConfigError(str(rule.type), "; ".join(errors)) from e
    raise InvalidConfigError(str(rule.type), f"unsupported payload type {type(raw).__name__}")
