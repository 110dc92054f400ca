"""Built-in advisors.

Architecture:
    - Advisor: Interface every rule implementation satisfies
    - CheckerAdvisor: Shared parse / walk / finish driver
    - Checker: Per-script visitor that records advice
    - AdvisorRegistry: (dialect, rule type) -> advisor, frozen after startup

Usage:
    from sqlreview.advisors import build_registry

    registry = build_registry()
    advisor = registry.lookup(Dialect.MYSQL, RuleType.WHERE_REQUIRE)
"""

from __future__ import annotations

from .base import ALL_DIALECTS, MYSQL_DIALECTS, Advisor, Checker, CheckerAdvisor, syntax_advice
from .column import ColumnTypeDisallowListAdvisor
from .index import IndexKeyNumberLimitAdvisor, IndexTypeNoBlobAdvisor
from .insert import (
    InsertDisallowOrderByRandAdvisor,
    InsertMustSpecifyColumnAdvisor,
    InsertRowLimitAdvisor,
)
from .registry import AdvisorRegistry, build_registry
from .statement import (
    AffectedRowLimitAdvisor,
    DisallowCommitAdvisor,
    NoLeadingWildcardLikeAdvisor,
    NoSelectAllAdvisor,
    WhereRequireAdvisor,
)
from .table import (
    NamingTableAdvisor,
    TableNoForeignKeyAdvisor,
    TableRequirePKAdvisor,
    UseInnoDBAdvisor,
)

BUILTIN_ADVISORS: tuple[type[Advisor], ...] = (
    InsertRowLimitAdvisor,
    AffectedRowLimitAdvisor,
    InsertMustSpecifyColumnAdvisor,
    InsertDisallowOrderByRandAdvisor,
    WhereRequireAdvisor,
    NoSelectAllAdvisor,
    NoLeadingWildcardLikeAdvisor,
    DisallowCommitAdvisor,
    IndexTypeNoBlobAdvisor,
    IndexKeyNumberLimitAdvisor,
    TableRequirePKAdvisor,
    TableNoForeignKeyAdvisor,
    NamingTableAdvisor,
    ColumnTypeDisallowListAdvisor,
    UseInnoDBAdvisor,
)


def builtin_advisors() -> list[Advisor]:
    """Fresh instances of every built-in advisor."""
    return [advisor_class() for advisor_class in BUILTIN_ADVISORS]


__all__ = [
    "ALL_DIALECTS",
    "BUILTIN_ADVISORS",
    "MYSQL_DIALECTS",
    "Advisor",
    "AdvisorRegistry",
    "AffectedRowLimitAdvisor",
    "Checker",
    "CheckerAdvisor",
    "ColumnTypeDisallowListAdvisor",
    "DisallowCommitAdvisor",
    "IndexKeyNumberLimitAdvisor",
    "IndexTypeNoBlobAdvisor",
    "InsertDisallowOrderByRandAdvisor",
    "InsertMustSpecifyColumnAdvisor",
    "InsertRowLimitAdvisor",
    "NamingTableAdvisor",
    "NoLeadingWildcardLikeAdvisor",
    "NoSelectAllAdvisor",
    "TableNoForeignKeyAdvisor",
    "TableRequirePKAdvisor",
    "UseInnoDBAdvisor",
    "WhereRequireAdvisor",
    "build_registry",
    "builtin_advisors",
    "syntax_advice",
]
