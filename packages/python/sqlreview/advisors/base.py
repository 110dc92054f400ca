"""Base classes for advisors and their statement checkers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import BaseModel

from ..advice import Advice, AdviceStatus, Code, ok_advice
from ..diagnostic import explain
from ..exceptions import ParseError
from ..nodes import Visit, walk
from ..parser import parse_statements
from ..payload import EmptyPayload, decode_payload
from ..rule import Dialect, RuleType, status_for_level

if TYPE_CHECKING:
    from ..context import Context
    from ..parser import Statement

logger = logging.getLogger(__name__)

ALL_DIALECTS = frozenset(Dialect)
MYSQL_DIALECTS = frozenset({Dialect.MYSQL, Dialect.TIDB})

P = TypeVar("P", bound=BaseModel)


def syntax_advice(error: ParseError) -> Advice:
    """The single advice a script that fails to parse produces."""
    return Advice(
        status=AdviceStatus.ERROR,
        code=Code.SYNTAX_ERROR,
        title="Syntax error",
        content=error.message,
        line=error.line,
    )


class Checker(Generic[P]):
    """Visits every statement of one script for one rule.

    A checker is created once per script. reset() runs before each statement,
    then the statement's tree is walked with enter(). finish() runs after the
    last statement and is where deferred findings are reported.
    """

    def __init__(self, ctx: Context, payload: P, status: AdviceStatus) -> None:
        self.ctx = ctx
        self.payload = payload
        self.status = status
        self.title = str(ctx.rule.type)
        self.advice: list[Advice] = []
        self.statement: Statement | None = None
        self.text = ""
        self.line = 0

    def enabled(self) -> bool:
        """Whether the payload turns the check on at all."""
        return True

    def reset(self, statement: Statement) -> None:
        self.statement = statement
        self.text = statement.text
        self.line = statement.line

    def enter(self, node: Any) -> Visit:
        return Visit.DESCEND

    def finish(self) -> None:
        pass

    def add(self, code: Code, content: str, line: int | None = None) -> None:
        self.advice.append(
            Advice(
                status=self.status,
                code=code,
                title=self.title,
                content=content,
                line=self.line if line is None else line,
            )
        )

    def internal(self, content: str) -> None:
        """Record a failed diagnostic. Always ERROR, whatever the rule level."""
        self.advice.append(
            Advice(
                status=AdviceStatus.ERROR,
                code=Code.INTERNAL,
                title=self.title,
                content=content,
                line=self.line,
            )
        )

    def estimate_rows(self, kind: str) -> int | None:
        """Estimated rows of the current statement, or None without a connection.

        Raises:
            DiagnosticError: If the EXPLAIN query fails or cannot be decoded.
        """
        if self.ctx.connection is None:
            return None
        return explain(self.ctx, self.text, kind)


class Advisor(ABC):
    """Evaluates one rule type against a script.

    Subclasses must implement:
    - rule_type: The rule id this advisor answers for
    - check(): Produce the advice for a script
    """

    @property
    @abstractmethod
    def rule_type(self) -> RuleType:
        """Rule id this advisor is registered under."""
        ...

    @property
    def dialects(self) -> frozenset[Dialect]:
        """Dialects this advisor is registered for."""
        return ALL_DIALECTS

    @abstractmethod
    def check(self, ctx: Context, sql: str | bytes) -> list[Advice]:
        """Check a script against ctx.rule.

        Returns:
            The advice list; never empty for an enabled rule.

        Raises:
            InvalidConfigError: If the rule payload is malformed.
        """
        ...


class CheckerAdvisor(Advisor, Generic[P]):
    """An advisor that walks every statement with a Checker.

    Subclasses set payload_model and implement create_checker().
    """

    payload_model: type[BaseModel] = EmptyPayload

    @abstractmethod
    def create_checker(self, ctx: Context, payload: P, status: AdviceStatus) -> Checker[P]:
        ...

    def check(self, ctx: Context, sql: str | bytes) -> list[Advice]:
        status = status_for_level(ctx.rule.level)
        if status is None:
            return []

        payload: P = decode_payload(self.payload_model, ctx.rule)  # type: ignore[assignment]

        try:
            statements = parse_statements(
                sql, ctx.rule.dialect, charset=ctx.charset, collation=ctx.collation
            )
        except ParseError as e:
            return [syntax_advice(e)]

        checker = self.create_checker(ctx, payload, status)
        if checker.enabled():
            for statement in statements:
                checker.reset(statement)
                walk(statement.node, checker.enter)
            checker.finish()

        logger.debug(
            "Rule %s produced %d finding(s) over %d statement(s)",
            ctx.rule.type,
            len(checker.advice),
            len(statements),
        )
        if not checker.advice:
            return [ok_advice()]
        return list(checker.advice)
