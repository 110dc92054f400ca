"""Main Reviewer class - the primary entry point for sqlreview."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from .advice import ReviewResult
from .advisors import build_registry, syntax_advice
from .config import ReviewConfig
from .context import Context
from .exceptions import ParseError
from .parser import parse_statements

if TYPE_CHECKING:
    import threading
    from collections.abc import Iterable

    from .advice import Advice
    from .advisors import Advisor, AdvisorRegistry
    from .diagnostic import Connection
    from .rule import Rule

logger = logging.getLogger(__name__)


class Reviewer:
    """Reviews change scripts against an ordered list of rules.

    The review process has three phases:
    1. Resolution: every active rule is matched to an advisor before anything runs
    2. Syntax gate: the script is parsed once per dialect; a failure ends the review
    3. Evaluation: advisors run in rule order and their advice is concatenated

    Example:
        >>> reviewer = Reviewer()
        >>> rules = [Rule(RuleType.WHERE_REQUIRE, Dialect.MYSQL, RuleLevel.ERROR)]
        >>> result = reviewer.review("DELETE FROM t", rules)
        >>> result.status
        <AdviceStatus.ERROR: 'ERROR'>
    """

    def __init__(
        self,
        registry: AdvisorRegistry | None = None,
        config: ReviewConfig | None = None,
    ) -> None:
        """Initialize the reviewer.

        Args:
            registry: Advisor registry; defaults to the built-in advisors.
            config: Engine defaults for charset, collation and diagnostic timeout.
        """
        self.registry = registry if registry is not None else build_registry()
        self.config = config or ReviewConfig()

    def review(
        self,
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
        """Review a script.

        Args:
            sql: The change script. Bytes are decoded with charset.
            rules: Rules in declaration order. DISABLED rules are ignored.
            charset: Script charset; defaults to config.default_charset.
            collation: Script collation; defaults to config.default_collation.
            connection: Optional read-only DB-API 2.0 connection for EXPLAIN checks.
            server_version: Version string of the connected server, selects
                the EXPLAIN layout.
            cancel_event: Set to cancel pending diagnostic queries.
            timeout: Seconds allowed for diagnostic queries; defaults to
                config.diagnostic_timeout.

        Returns:
            ReviewResult with advice in rule order. A script that fails to parse
            yields a single syntax advice.

        Raises:
            NotSupportedError: If a rule has no advisor for its dialect.
            InvalidConfigError: If a rule payload is malformed.
        """
        charset = charset or self.config.default_charset
        collation = collation or self.config.default_collation

        active = [rule for rule in rules if rule.is_active]
        resolved: list[tuple[Rule, Advisor]] = [
            (rule, self.registry.lookup(rule.dialect, rule.type)) for rule in active
        ]
        if not resolved:
            return ReviewResult()

        for dialect in dict.fromkeys(rule.dialect for rule in active):
            try:
                parse_statements(sql, dialect, charset=charset, collation=collation)
            except ParseError as e:
                logger.debug("Script rejected for %s: %s (line %d)", dialect, e.message, e.line)
                return ReviewResult(advice=(syntax_advice(e),))

        if timeout is None:
            timeout = self.config.diagnostic_timeout
        deadline = time.monotonic() + timeout if timeout is not None else None

        advice: list[Advice] = []
        for rule, advisor in resolved:
            ctx = Context(
                rule=rule,
                charset=charset,
                collation=collation,
                connection=connection,
                server_version=server_version,
                cancel_event=cancel_event,
                deadline=deadline,
            )
            advice.extend(advisor.check(ctx, sql))
        return ReviewResult(advice=tuple(advice))
