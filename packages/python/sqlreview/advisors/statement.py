"""Advisors for statement shape: WHERE clauses, projections, LIKE patterns, COMMIT, affected rows."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlglot import exp

from ..advice import AdviceStatus, Code
from ..exceptions import DiagnosticError
from ..nodes import Commit, Delete, Query, Update, Visit
from ..payload import EmptyPayload, NumberPayload
from ..rule import RuleType
from .base import Checker, CheckerAdvisor

if TYPE_CHECKING:
    from ..context import Context


class WhereRequireChecker(Checker[EmptyPayload]):
    """Flags statements and nested queries that lack a WHERE clause."""

    def enter(self, node: Any) -> Visit:
        if isinstance(node, (Update, Delete)) and not node.has_where:
            self.add(Code.STATEMENT_NO_WHERE, f'"{self.text}" requires WHERE clause')
        elif isinstance(node, Query) and node.has_from and not node.has_where:
            self.add(Code.STATEMENT_NO_WHERE, f'"{self.text}" requires WHERE clause')
        return Visit.DESCEND


class WhereRequireAdvisor(CheckerAdvisor[EmptyPayload]):
    """UPDATE, DELETE and SELECT ... FROM must have a WHERE clause.

    Nested queries are checked as well.
    """

    @property
    def rule_type(self) -> RuleType:
        return RuleType.WHERE_REQUIRE

    def create_checker(
        self, ctx: Context, payload: EmptyPayload, status: AdviceStatus
    ) -> WhereRequireChecker:
        return WhereRequireChecker(ctx, payload, status)


class NoSelectAllChecker(Checker[EmptyPayload]):
    """Flags the outermost SELECT * of a statement."""

    def enter(self, node: Any) -> Visit:
        if isinstance(node, Query) and node.star:
            self.add(Code.STATEMENT_NO_SELECT_ALL, f'"{self.text}" uses SELECT all')
            return Visit.SKIP
        return Visit.DESCEND


class NoSelectAllAdvisor(CheckerAdvisor[EmptyPayload]):
    """Disallow SELECT *. Nested queries of a flagged query are not reported again."""

    @property
    def rule_type(self) -> RuleType:
        return RuleType.NO_SELECT_ALL

    def create_checker(
        self, ctx: Context, payload: EmptyPayload, status: AdviceStatus
    ) -> NoSelectAllChecker:
        return NoSelectAllChecker(ctx, payload, status)


def has_leading_wildcard(expression: exp.Expression) -> bool:
    """Whether any LIKE / ILIKE pattern literal starts with '%'."""
    for like in expression.find_all(exp.Like, exp.ILike):
        pattern = like.expression
        if isinstance(pattern, exp.Literal) and pattern.is_string and pattern.this.startswith("%"):
            return True
    return False


class NoLeadingWildcardLikeChecker(Checker[EmptyPayload]):
    """Flags a LIKE pattern starting with '%', once per statement."""

    def enter(self, node: Any) -> Visit:
        # The statement root carries the whole expression tree.
        expression = getattr(node, "expr", None)
        if expression is not None and has_leading_wildcard(expression):
            self.add(
                Code.STATEMENT_LEADING_WILDCARD_LIKE,
                f'"{self.text}" uses leading wildcard LIKE',
            )
        return Visit.SKIP


class NoLeadingWildcardLikeAdvisor(CheckerAdvisor[EmptyPayload]):
    """Disallow LIKE '%...'. Reported at most once per statement."""

    @property
    def rule_type(self) -> RuleType:
        return RuleType.NO_LEADING_WILDCARD_LIKE

    def create_checker(
        self, ctx: Context, payload: EmptyPayload, status: AdviceStatus
    ) -> NoLeadingWildcardLikeChecker:
        return NoLeadingWildcardLikeChecker(ctx, payload, status)


class DisallowCommitChecker(Checker[EmptyPayload]):
    """Flags COMMIT."""

    def enter(self, node: Any) -> Visit:
        if isinstance(node, Commit):
            self.add(
                Code.STATEMENT_DISALLOW_COMMIT,
                f'Commit is not allowed, related statement: "{self.text}"',
            )
        return Visit.SKIP


class DisallowCommitAdvisor(CheckerAdvisor[EmptyPayload]):
    """Disallow COMMIT inside a change script."""

    @property
    def rule_type(self) -> RuleType:
        return RuleType.DISALLOW_COMMIT

    def create_checker(
        self, ctx: Context, payload: EmptyPayload, status: AdviceStatus
    ) -> DisallowCommitChecker:
        return DisallowCommitChecker(ctx, payload, status)


class AffectedRowLimitChecker(Checker[NumberPayload]):
    """Asks EXPLAIN how many rows an UPDATE or DELETE touches."""

    def enabled(self) -> bool:
        return self.payload.number > 0

    def enter(self, node: Any) -> Visit:
        if not isinstance(node, (Update, Delete)):
            return Visit.SKIP
        kind = "update" if isinstance(node, Update) else "delete"
        try:
            rows = self.estimate_rows(kind)
        except DiagnosticError as e:
            self.internal(f'failed to get row count for "{self.text}": {e}')
            return Visit.SKIP
        if rows is not None and rows > self.payload.number:
            self.add(
                Code.STATEMENT_AFFECTED_ROW_EXCEEDS_LIMIT,
                f'"{self.text}" affected {rows} rows. The count exceeds {self.payload.number}.',
            )
        return Visit.SKIP


class AffectedRowLimitAdvisor(CheckerAdvisor[NumberPayload]):
    """Limit the rows an UPDATE or DELETE may touch.

    Row counts come from EXPLAIN only; without a connection nothing is reported.
    """

    payload_model = NumberPayload

    @property
    def rule_type(self) -> RuleType:
        return RuleType.AFFECTED_ROW_LIMIT

    def create_checker(
        self, ctx: Context, payload: NumberPayload, status: AdviceStatus
    ) -> AffectedRowLimitChecker:
        return AffectedRowLimitChecker(ctx, payload, status)
