"""sqlreview - policy-driven review of database change scripts.

sqlreview checks a proposed change script against an ordered set of
configurable rules before the change runs, and returns structured advice:
one finding per violation, or a single OK per rule that found nothing.

Quick Start:
    >>> import sqlreview
    >>> from sqlreview import Dialect, Rule, RuleLevel, RuleType

    >>> rules = [Rule(RuleType.WHERE_REQUIRE, Dialect.MYSQL, RuleLevel.ERROR)]
    >>> result = sqlreview.review("DELETE FROM t", rules)
    >>> bool(result)
    False
    >>> result.advice[0].content
    '"DELETE FROM t" requires WHERE clause'

    # Rules from a policy document
    >>> rules = sqlreview.load_policy(
    ...     '{"engine": "MYSQL", "ruleList": ['
    ...     '{"type": "statement.insert.row-limit", "level": "WARNING", "payload": {"number": 2}}]}'
    ... )
    >>> sqlreview.review("INSERT INTO t VALUES (1), (2), (3)", rules).status
    <AdviceStatus.WARNING: 'WARNING'>

Dynamic checks:
    Row-count rules estimate INSERT ... SELECT, UPDATE and DELETE with EXPLAIN
    when a read-only DB-API 2.0 connection is passed to review(). Without one
    those checks report nothing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .advice import Advice, AdviceStatus, Code, ReviewResult
from .advisors import Advisor, AdvisorRegistry, Checker, CheckerAdvisor, build_registry
from .config import ReviewConfig
from .context import Context
from .exceptions import (
    ConfigurationError,
    DiagnosticError,
    DuplicateAdvisorError,
    InvalidConfigError,
    NotSupportedError,
    ParseError,
    SQLReviewError,
)
from .parser import Parser, Statement, parse_statements
from .policy import load_policy
from .reviewer import Reviewer
from .rule import Dialect, Rule, RuleLevel, RuleType

if TYPE_CHECKING:
    import threading
    from collections.abc import Iterable

    from .diagnostic import Connection

__version__ = "0.1.0"
__all__ = [
    # Main API
    "review",
    "Reviewer",
    "load_policy",
    # Types
    "Advice",
    "AdviceStatus",
    "Code",
    "ReviewResult",
    "Rule",
    "RuleLevel",
    "RuleType",
    "Dialect",
    "Context",
    "ReviewConfig",
    # Parsing
    "Parser",
    "Statement",
    "parse_statements",
    # Extension
    "Advisor",
    "AdvisorRegistry",
    "Checker",
    "CheckerAdvisor",
    "build_registry",
    # Exceptions
    "SQLReviewError",
    "ConfigurationError",
    "DuplicateAdvisorError",
    "InvalidConfigError",
    "NotSupportedError",
    "ParseError",
    "DiagnosticError",
]

# Default reviewer instance for the simple API
_default_reviewer = Reviewer()


def review(
    sql: str | bytes,
    rules: Iterable[Rule],
    *,
    charset: str | None = None,
    collation: str | None = None,
    connection: Connection | None = None,
    server_version: str | None = None,
    cancel_event: threading.Event | None = None,
    timeout: float | None = None,
) -> ReviewResult:
    """Review a script with the built-in advisors.

    See Reviewer.review() for the arguments. For a custom registry or
    configuration, create a Reviewer instance.
    """
    return _default_reviewer.review(
        sql,
        rules,
        charset=charset,
        collation=collation,
        connection=connection,
        server_version=server_version,
        cancel_event=cancel_event,
        timeout=timeout,
    )
