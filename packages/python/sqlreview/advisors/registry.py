"""Advisor registry keyed by (dialect, rule type)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..exceptions import ConfigurationError, DuplicateAdvisorError, NotSupportedError
from ..rule import Dialect

if TYPE_CHECKING:
    from .base import Advisor

logger = logging.getLogger(__name__)


class AdvisorRegistry:
    """Maps (dialect, rule type) to the advisor that evaluates it.

    Registration happens once, single-threaded, before any review; freeze()
    then makes the registry read-only so lookups need no synchronization.

    Example:
        registry = AdvisorRegistry()
        registry.register(Dialect.MYSQL, "statement.where.require", WhereRequireAdvisor())
        registry.freeze()

        advisor = registry.lookup(Dialect.MYSQL, "statement.where.require")
    """

    def __init__(self) -> None:
        self._advisors: dict[tuple[Dialect, str], Advisor] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, dialect: Dialect | str, rule_type: str, advisor: Advisor) -> None:
        """Register an advisor.

        Raises:
            DuplicateAdvisorError: If the key is already registered.
            ConfigurationError: If the registry is frozen.
        """
        if self._frozen:
            raise ConfigurationError("Cannot register advisors after the registry is frozen")
        key = (Dialect(dialect), str(rule_type))
        if key in self._advisors:
            raise DuplicateAdvisorError(key[0].value, key[1])
        self._advisors[key] = advisor

    def get(self, dialect: Dialect | str, rule_type: str) -> Advisor | None:
        """Get an advisor, or None if nothing is registered for the key."""
        return self._advisors.get((Dialect(dialect), str(rule_type)))

    def lookup(self, dialect: Dialect | str, rule_type: str) -> Advisor:
        """Get an advisor by exact key.

        Raises:
            NotSupportedError: If nothing is registered for the key.
        """
        advisor = self.get(dialect, rule_type)
        if advisor is None:
            raise NotSupportedError(Dialect(dialect).value, str(rule_type))
        return advisor

    def all(self) -> list[tuple[Dialect, str, Advisor]]:
        """All registrations in registration order."""
        return [(dialect, rule_type, advisor) for (dialect, rule_type), advisor in self._advisors.items()]

    def freeze(self) -> None:
        self._frozen = True

    def __contains__(self, key: object) -> bool:
        return key in self._advisors

    def __len__(self) -> int:
        return len(self._advisors)


def build_registry(advisors: list[Advisor] | None = None) -> AdvisorRegistry:
    """Register advisors for each of their dialects and return the frozen registry.

    Args:
        advisors: Advisors to register; defaults to the built-in set.

    Raises:
        DuplicateAdvisorError: If two advisors claim the same (dialect, rule type).
    """
    if advisors is None:
        from . import builtin_advisors

        advisors = builtin_advisors()

    registry = AdvisorRegistry()
    for advisor in advisors:
        for dialect in sorted(advisor.dialects, key=lambda d: d.value):
            registry.register(dialect, advisor.rule_type, advisor)
    registry.freeze()
    logger.info("Registered %d advisor(s) for %d rule type(s)", len(registry), len(advisors))
    return registry
