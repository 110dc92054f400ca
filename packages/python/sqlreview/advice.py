"""Advice and review result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum


class AdviceStatus(str, Enum):
    """Outcome of one finding, ordered SUCCESS < WARNING < ERROR."""

    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {
    AdviceStatus.SUCCESS: 0,
    AdviceStatus.WARNING: 1,
    AdviceStatus.ERROR: 2,
}


class Code(IntEnum):
    """Stable advice codes. Callers branch on these, never on content text."""

    OK = 0
    INTERNAL = 1
    NOT_FOUND = 2
    UNSUPPORTED = 3

    # 201 ~ 299 statement
    SYNTAX_ERROR = 201
    STATEMENT_NO_WHERE = 202
    STATEMENT_NO_SELECT_ALL = 203
    STATEMENT_LEADING_WILDCARD_LIKE = 204
    STATEMENT_DISALLOW_COMMIT = 206
    STATEMENT_AFFECTED_ROW_EXCEEDS_LIMIT = 209

    # 301 ~ 399 naming
    NAMING_TABLE_CONVENTION_MISMATCH = 301

    # 401 ~ 499 column
    DISABLED_COLUMN_TYPE = 411

    # 501 ~ 599 engine
    NOT_INNODB_ENGINE = 501

    # 601 ~ 699 table
    TABLE_NO_PK = 601
    TABLE_HAS_FK = 602

    # 801 ~ 899 index
    INDEX_KEY_NUMBER_EXCEEDS_LIMIT = 802
    INDEX_TYPE_NO_BLOB = 804

    # 1101 ~ 1199 insert
    INSERT_TOO_MANY_ROWS = 1101
    INSERT_NOT_SPECIFY_COLUMN = 1107
    INSERT_USE_ORDER_BY_RAND = 1108


@dataclass(frozen=True)
class Advice:
    """One finding produced by a rule against a script.

    Attributes:
        status: Severity of the finding.
        code: Stable integer code.
        title: Rule type that produced the finding ("OK" for synthesized success).
        content: Human-readable description. Wording may change between releases.
        line: 1-based line of the statement, 0 when not tied to a statement.
    """

    status: AdviceStatus
    code: Code
    title: str
    content: str = ""
    line: int = 0


def ok_advice() -> Advice:
    """The advice a rule contributes when it finds nothing."""
    return Advice(status=AdviceStatus.SUCCESS, code=Code.OK, title="OK")


@dataclass(frozen=True)
class ReviewResult:
    """Ordered advice for one script.

    Attributes:
        advice: Findings in rule order, then statement order, then discovery order.
    """

    advice: tuple[Advice, ...] = field(default_factory=tuple)

    @property
    def status(self) -> AdviceStatus:
        """The most severe status present (SUCCESS when there is no advice)."""
        status = AdviceStatus.SUCCESS
        for item in self.advice:
            if item.status.rank > status.rank:
                status = item.status
        return status

    def __bool__(self) -> bool:
        """True when nothing blocks the change."""
        return self.status is not AdviceStatus.ERROR

    def __len__(self) -> int:
        return len(self.advice)
