"""Shared fixtures: a fake DB-API connection and a single-rule runner."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from typing import Any

import pytest

from sqlreview import Advice, Context, Dialect, Rule, RuleLevel
from sqlreview.advisors import AdvisorRegistry, build_registry


class FakeCursor:
    def __init__(self, connection: FakeConnection) -> None:
        self.connection = connection

    def execute(self, operation: str, *args: Any) -> None:
        self.connection.executed.append(operation)
        if self.connection.on_execute is not None:
            self.connection.on_execute()
        if self.connection.delay:
            time.sleep(self.connection.delay)
        if self.connection.error is not None:
            raise self.connection.error

    def fetchall(self) -> Sequence[Sequence[Any]]:
        return self.connection.rows

    def close(self) -> None:
        self.connection.closed += 1


class FakeConnection:
    """Records executed statements and returns canned EXPLAIN rows."""

    def __init__(
        self,
        rows: Sequence[Sequence[Any]] = (),
        error: Exception | None = None,
        delay: float = 0.0,
        on_execute: Callable[[], None] | None = None,
    ) -> None:
        self.rows = list(rows)
        self.error = error
        self.delay = delay
        self.on_execute = on_execute
        self.executed: list[str] = []
        self.closed = 0

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)


def mysql_explain(rows: Any) -> list[tuple[Any, ...]]:
    """EXPLAIN INSERT ... SELECT output of MySQL 5.7+ with the given estimate."""
    insert_row = (1, "INSERT", "t", None, "ALL", None, None, None, None, None, None, None)
    select_row = (1, "SIMPLE", "other", None, "ALL", None, None, None, None, rows, 100.0, None)
    return [insert_row, select_row]


@pytest.fixture(scope="session")
def registry() -> AdvisorRegistry:
    return build_registry()


@pytest.fixture
def run_rule(registry: AdvisorRegistry) -> Callable[..., list[Advice]]:
    """Run one rule over a script and return its advice."""

    def run(
        rule_type: str,
        sql: str | bytes,
        *,
        dialect: Dialect = Dialect.MYSQL,
        level: RuleLevel = RuleLevel.WARNING,
        payload: Any = None,
        **context: Any,
    ) -> list[Advice]:
        rule = Rule(type=rule_type, dialect=dialect, level=level, payload=payload)
        advisor = registry.lookup(dialect, rule_type)
        return advisor.check(Context(rule=rule, **context), sql)

    return run
