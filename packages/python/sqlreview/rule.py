"""Rule definitions as supplied by the policy store."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from .advice import AdviceStatus


class Dialect(str, Enum):
    """Target database engines."""

    MYSQL = "MYSQL"
    TIDB = "TIDB"
    POSTGRES = "POSTGRES"

    @property
    def sqlglot_dialect(self) -> str:
        """Name of the sqlglot dialect used to tokenize and parse scripts."""
        return _SQLGLOT_DIALECTS[self]


_SQLGLOT_DIALECTS = {
    Dialect.MYSQL: "mysql",
    Dialect.TIDB: "mysql",
    Dialect.POSTGRES: "postgres",
}


class RuleLevel(str, Enum):
    """Configured severity of a rule."""

    DISABLED = "DISABLED"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class RuleType(str, Enum):
    """Identifiers of the built-in rules."""

    INSERT_ROW_LIMIT = "statement.insert.row-limit"
    AFFECTED_ROW_LIMIT = "statement.affected-row-limit"
    INSERT_MUST_SPECIFY_COLUMN = "statement.insert.must-specify-column"
    INSERT_DISALLOW_ORDER_BY_RAND = "statement.insert.disallow-order-by-rand"
    WHERE_REQUIRE = "statement.where.require"
    NO_SELECT_ALL = "statement.select.no-select-all"
    NO_LEADING_WILDCARD_LIKE = "statement.where.no-leading-wildcard-like"
    DISALLOW_COMMIT = "statement.disallow-commit"
    INDEX_TYPE_NO_BLOB = "index.type-no-blob"
    INDEX_KEY_NUMBER_LIMIT = "index.key-number-limit"
    TABLE_REQUIRE_PK = "table.require-pk"
    TABLE_NO_FOREIGN_KEY = "table.no-foreign-key"
    NAMING_TABLE = "naming.table"
    COLUMN_TYPE_DISALLOW_LIST = "column.type-disallow-list"
    MYSQL_ENGINE = "engine.mysql.use-innodb"

    def __str__(self) -> str:
        return self.value


Payload = Union[str, bytes, Mapping[str, Any], None]


@dataclass(frozen=True)
class Rule:
    """A configured policy check.

    Attributes:
        type: Stable rule id, e.g. "statement.insert.row-limit".
        dialect: Engine the rule applies to.
        level: Configured severity; DISABLED rules are never evaluated.
        payload: Opaque rule configuration (JSON text, bytes, mapping, or None).
    """

    type: str
    dialect: Dialect
    level: RuleLevel = RuleLevel.WARNING
    payload: Payload = None

    def __post_init__(self) -> None:
        # Accept plain strings from callers that build rules by hand.
        object.__setattr__(self, "type", str(self.type))
        object.__setattr__(self, "dialect", Dialect(self.dialect))
        object.__setattr__(self, "level", RuleLevel(self.level))

    @property
    def is_active(self) -> bool:
        return self.level is not RuleLevel.DISABLED


def status_for_level(level: RuleLevel) -> AdviceStatus | None:
    """Map a rule level to the status its findings carry.

    INFO findings are recorded with their real code but as SUCCESS, so they
    never raise the overall status of a review. DISABLED maps to None.
    """
    if level is RuleLevel.ERROR:
        return AdviceStatus.ERROR
    if level is RuleLevel.WARNING:
        return AdviceStatus.WARNING
    if level is RuleLevel.INFO:
        return AdviceStatus.SUCCESS
    return None
