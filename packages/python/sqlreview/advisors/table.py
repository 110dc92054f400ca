"""Advisors for table definitions: primary keys, foreign keys, naming, storage engine."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from ..advice import AdviceStatus, Code
from ..nodes import (
    AddColumn,
    AddIndex,
    AlterTable,
    CreateTable,
    DropIndex,
    DropTable,
    IndexKind,
    RenameTable,
    TableOption,
    Visit,
)
from ..payload import EmptyPayload, NamingPayload
from ..rule import Dialect, RuleType
from .base import MYSQL_DIALECTS, Checker, CheckerAdvisor

if TYPE_CHECKING:
    from ..context import Context


class TableRequirePKChecker(Checker[EmptyPayload]):
    """Reports tables still lacking a primary key once the whole script is read.

    A later ALTER TABLE ... ADD PRIMARY KEY or DROP TABLE clears the finding.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        # table -> (statement text, line) of the statement that left it without a PK
        self.missing: dict[str, tuple[str, int]] = {}

    def enter(self, node: Any) -> Visit:
        if isinstance(node, CreateTable):
            if node.as_select or node.like is not None:
                return Visit.SKIP
            if any(index.kind is IndexKind.PRIMARY for index in node.all_indexes):
                self.missing.pop(node.table, None)
            else:
                self.missing[node.table] = (self.text, self.line)
        elif isinstance(node, AlterTable):
            table = node.table
            for action in node.actions:
                if isinstance(action, AddIndex) and action.index.kind is IndexKind.PRIMARY:
                    self.missing.pop(table, None)
                elif isinstance(action, AddColumn) and action.column.primary_key:
                    self.missing.pop(table, None)
                elif isinstance(action, DropIndex) and action.kind is IndexKind.PRIMARY:
                    self.missing.pop(table, None)
                    self.missing[table] = (self.text, self.line)
                elif isinstance(action, RenameTable):
                    if table in self.missing:
                        self.missing[action.new_name] = self.missing.pop(table)
                    table = action.new_name
        elif isinstance(node, DropTable):
            for table in node.tables:
                self.missing.pop(table, None)
        return Visit.SKIP

    def finish(self) -> None:
        # Renames and DROP PRIMARY KEY reorder the entries; report in script order.
        for table, (text, line) in sorted(self.missing.items(), key=lambda item: item[1][1]):
            self.add(
                Code.TABLE_NO_PK,
                f'Table `{table}` requires PRIMARY KEY, related statement: "{text}"',
                line=line,
            )


class TableRequirePKAdvisor(CheckerAdvisor[EmptyPayload]):
    """Every created table must end the script with a primary key."""

    @property
    def rule_type(self) -> RuleType:
        return RuleType.TABLE_REQUIRE_PK

    def create_checker(
        self, ctx: Context, payload: EmptyPayload, status: AdviceStatus
    ) -> TableRequirePKChecker:
        return TableRequirePKChecker(ctx, payload, status)


class TableNoForeignKeyChecker(Checker[EmptyPayload]):
    """Flags foreign keys in CREATE TABLE and ALTER TABLE."""

    def enter(self, node: Any) -> Visit:
        has_foreign_key = False
        if isinstance(node, CreateTable):
            has_foreign_key = any(index.kind is IndexKind.FOREIGN for index in node.all_indexes)
        elif isinstance(node, AlterTable):
            for action in node.actions:
                if isinstance(action, AddIndex) and action.index.kind is IndexKind.FOREIGN:
                    has_foreign_key = True
                elif isinstance(action, AddColumn) and action.column.references:
                    has_foreign_key = True
        if has_foreign_key:
            self.add(
                Code.TABLE_HAS_FK,
                f'Foreign key is not allowed in the table `{node.table}`, related statement: "{self.text}"',
            )
        return Visit.SKIP


class TableNoForeignKeyAdvisor(CheckerAdvisor[EmptyPayload]):
    """Disallow foreign keys."""

    @property
    def rule_type(self) -> RuleType:
        return RuleType.TABLE_NO_FOREIGN_KEY

    def create_checker(
        self, ctx: Context, payload: EmptyPayload, status: AdviceStatus
    ) -> TableNoForeignKeyChecker:
        return TableNoForeignKeyChecker(ctx, payload, status)


class NamingTableChecker(Checker[NamingPayload]):
    """Checks created and renamed table names."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.pattern = re.compile(self.payload.format)

    def enter(self, node: Any) -> Visit:
        if isinstance(node, CreateTable):
            self._check(node.table)
        elif isinstance(node, AlterTable):
            for action in node.actions:
                if isinstance(action, RenameTable):
                    self._check(action.new_name)
        return Visit.SKIP

    def _check(self, name: str) -> None:
        if self.pattern.search(name) is None:
            self.add(
                Code.NAMING_TABLE_CONVENTION_MISMATCH,
                f'`{name}` mismatches table naming convention, naming format should be "{self.payload.format}"',
            )
        if len(name) > self.payload.max_length:
            self.add(
                Code.NAMING_TABLE_CONVENTION_MISMATCH,
                f"`{name}` mismatches table naming convention, its length should be within "
                f"{self.payload.max_length} characters",
            )


class NamingTableAdvisor(CheckerAdvisor[NamingPayload]):
    """Table names must match a pattern and stay within a length limit."""

    payload_model = NamingPayload

    @property
    def rule_type(self) -> RuleType:
        return RuleType.NAMING_TABLE

    def create_checker(
        self, ctx: Context, payload: NamingPayload, status: AdviceStatus
    ) -> NamingTableChecker:
        return NamingTableChecker(ctx, payload, status)


class UseInnoDBChecker(Checker[EmptyPayload]):
    """Flags an explicit ENGINE option other than InnoDB."""

    def enter(self, node: Any) -> Visit:
        engines: list[str] = []
        if isinstance(node, CreateTable) and node.engine is not None:
            engines.append(node.engine)
        elif isinstance(node, AlterTable):
            for action in node.actions:
                if isinstance(action, TableOption) and action.name == "ENGINE":
                    engines.append(action.value)
        if any(engine.lower() != "innodb" for engine in engines):
            self.add(Code.NOT_INNODB_ENGINE, f"\"{self.text}\" doesn't use InnoDB engine")
        return Visit.SKIP


class UseInnoDBAdvisor(CheckerAdvisor[EmptyPayload]):
    """Tables must use InnoDB. Only an explicit ENGINE option is checked."""

    @property
    def rule_type(self) -> RuleType:
        return RuleType.MYSQL_ENGINE

    @property
    def dialects(self) -> frozenset[Dialect]:
        return MYSQL_DIALECTS

    def create_checker(
        self, ctx: Context, payload: EmptyPayload, status: AdviceStatus
    ) -> UseInnoDBChecker:
        return UseInnoDBChecker(ctx, payload, status)
