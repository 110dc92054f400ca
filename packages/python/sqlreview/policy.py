"""Loading SQL review policies.

A policy document lists rules in evaluation order:

    {
        "engine": "MYSQL",
        "ruleList": [
            {"type": "statement.where.require", "level": "ERROR"},
            {"type": "statement.insert.row-limit", "level": "WARNING",
             "payload": "{\\"number\\": 1000}"}
        ]
    }

Each rule may carry its own "engine"; otherwise the document engine applies.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .rule import Dialect, Rule, RuleLevel


def _upper(value: Any) -> Any:
    return value.upper() if isinstance(value, str) else value


class RuleEntry(BaseModel):
    """One entry of a policy's ruleList."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str = Field(min_length=1)
    level: RuleLevel
    engine: Dialect | None = None
    payload: str | dict[str, Any] | None = None

    @field_validator("level", "engine", mode="before")
    @classmethod
    def normalize_enum(cls, value: Any) -> Any:
        return _upper(value)


class PolicyDocument(BaseModel):
    """A SQL review policy."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    engine: Dialect | None = None
    rule_list: list[RuleEntry] = Field(default_factory=list, alias="ruleList")

    @field_validator("engine", mode="before")
    @classmethod
    def normalize_engine(cls, value: Any) -> Any:
        return _upper(value)


def load_policy(
    document: str | bytes | Mapping[str, Any],
    *,
    dialect: Dialect | str | None = None,
) -> list[Rule]:
    """Build the ordered rule list of a policy document.

    Args:
        document: JSON text or an already-decoded mapping.
        dialect: If given, only rules for this engine are returned, and rules
            without any engine are bound to it.

    Returns:
        Rules in document order.

    Raises:
        ConfigurationError: If the document is malformed or a rule has no engine.
    """
    try:
        if isinstance(document, (str, bytes)):
            policy = PolicyDocument.model_validate_json(document)
        else:
            policy = PolicyDocument.model_validate(dict(document))
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = " -> ".join(str(x) for x in error["loc"]) or "document"
            errors.append(f"{loc}: {error['msg']}")
        raise ConfigurationError(f"Invalid SQL review policy: {'; '.join(errors)}") from e

    target = Dialect(_upper(dialect)) if dialect is not None else None
    rules: list[Rule] = []
    for position, entry in enumerate(policy.rule_list):
        engine = entry.engine or policy.engine or target
        if engine is None:
            raise ConfigurationError(
                f"Invalid SQL review policy: ruleList -> {position}: rule '{entry.type}' has no engine"
            )
        if target is not None and engine is not target:
            continue
        rules.append(Rule(type=entry.type, dialect=engine, level=entry.level, payload=entry.payload))
    return rules
