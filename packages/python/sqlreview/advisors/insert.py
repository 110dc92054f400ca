"""Advisors for INSERT statements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlglot import exp

from ..advice import AdviceStatus, Code
from ..exceptions import DiagnosticError
from ..nodes import Insert, Visit
from ..payload import EmptyPayload, NumberPayload
from ..rule import Dialect, RuleType
from .base import MYSQL_DIALECTS, Checker, CheckerAdvisor

if TYPE_CHECKING:
    from ..context import Context


class InsertRowLimitChecker(Checker[NumberPayload]):
    """Counts VALUES rows, or asks EXPLAIN for INSERT ... SELECT."""

    def enabled(self) -> bool:
        return self.payload.number > 0

    def enter(self, node: Any) -> Visit:
        if not isinstance(node, Insert):
            return Visit.SKIP

        if node.row_count is not None:
            rows: int | None = node.row_count
        elif node.query is not None:
            try:
                rows = self.estimate_rows("insert")
            except DiagnosticError as e:
                self.internal(f'failed to get row count for "{self.text}": {e}')
                return Visit.SKIP
        else:
            rows = None

        if rows is not None and rows > self.payload.number:
            self.add(
                Code.INSERT_TOO_MANY_ROWS,
                f'"{self.text}" inserts {rows} rows. The count exceeds {self.payload.number}.',
            )
        return Visit.SKIP


class InsertRowLimitAdvisor(CheckerAdvisor[NumberPayload]):
    """Limit the rows one INSERT may add.

    VALUES lists are counted directly. INSERT ... SELECT is estimated with
    EXPLAIN when a connection is available and skipped otherwise.
    A number <= 0 disables the check.
    """

    payload_model = NumberPayload

    @property
    def rule_type(self) -> RuleType:
        return RuleType.INSERT_ROW_LIMIT

    def create_checker(
        self, ctx: Context, payload: NumberPayload, status: AdviceStatus
    ) -> InsertRowLimitChecker:
        return InsertRowLimitChecker(ctx, payload, status)


class InsertMustSpecifyColumnChecker(Checker[EmptyPayload]):
    """Flags INSERT statements without a column list."""

    def enter(self, node: Any) -> Visit:
        if isinstance(node, Insert) and not node.columns:
            self.add(
                Code.INSERT_NOT_SPECIFY_COLUMN,
                f'The INSERT statement must specify columns but "{self.text}" does not',
            )
        return Visit.SKIP


class InsertMustSpecifyColumnAdvisor(CheckerAdvisor[EmptyPayload]):
    """INSERT must name its target columns."""

    @property
    def rule_type(self) -> RuleType:
        return RuleType.INSERT_MUST_SPECIFY_COLUMN

    def create_checker(
        self, ctx: Context, payload: EmptyPayload, status: AdviceStatus
    ) -> InsertMustSpecifyColumnChecker:
        return InsertMustSpecifyColumnChecker(ctx, payload, status)


def _is_rand(function: exp.Func) -> bool:
    name = function.name if isinstance(function, exp.Anonymous) else function.sql_name()
    return name.upper() == "RAND"


def orders_by_rand(expression: exp.Expression) -> bool:
    """Whether any ORDER BY in the expression sorts on RAND()."""
    for order in expression.find_all(exp.Order):
        if any(_is_rand(function) for function in order.find_all(exp.Func)):
            return True
    return False


class InsertDisallowOrderByRandChecker(Checker[EmptyPayload]):
    """Flags INSERT ... SELECT ordered by RAND()."""

    def enter(self, node: Any) -> Visit:
        if isinstance(node, Insert) and node.query is not None and node.query.expr is not None:
            if orders_by_rand(node.query.expr):
                self.add(
                    Code.INSERT_USE_ORDER_BY_RAND,
                    f'"{self.text}" uses ORDER BY RAND in the INSERT statement',
                )
        return Visit.SKIP


class InsertDisallowOrderByRandAdvisor(CheckerAdvisor[EmptyPayload]):
    """Disallow ORDER BY RAND() in INSERT ... SELECT."""

    @property
    def rule_type(self) -> RuleType:
        return RuleType.INSERT_DISALLOW_ORDER_BY_RAND

    @property
    def dialects(self) -> frozenset[Dialect]:
        return MYSQL_DIALECTS

    def create_checker(
        self, ctx: Context, payload: EmptyPayload, status: AdviceStatus
    ) -> InsertDisallowOrderByRandChecker:
        return InsertDisallowOrderByRandChecker(ctx, payload, status)
