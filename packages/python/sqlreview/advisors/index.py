"""Advisors for index definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..advice import AdviceStatus, Code
from ..nodes import (
    AddColumn,
    AddIndex,
    AlterTable,
    CreateIndex,
    CreateTable,
    DropColumn,
    DropTable,
    Index,
    IndexKind,
    ModifyColumn,
    RenameTable,
    Visit,
)
from ..payload import EmptyPayload, NumberPayload
from ..rule import Dialect, RuleType
from .base import MYSQL_DIALECTS, Checker, CheckerAdvisor

if TYPE_CHECKING:
    from ..context import Context

BLOB_TYPES = frozenset({"blob", "tinyblob", "mediumblob", "longblob"})


class IndexTypeNoBlobChecker(Checker[EmptyPayload]):
    """Tracks column types across the script so later statements see earlier tables."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.tables: dict[str, dict[str, str]] = {}

    def enter(self, node: Any) -> Visit:
        if isinstance(node, CreateTable):
            self.tables[node.table] = {column.name: column.type_name for column in node.columns}
            for index in node.all_indexes:
                self._check(node.table, index)
        elif isinstance(node, AlterTable):
            self._alter(node)
        elif isinstance(node, CreateIndex):
            self._check(node.table, node.index)
        elif isinstance(node, DropTable):
            for table in node.tables:
                self.tables.pop(table, None)
        return Visit.SKIP

    def _alter(self, node: AlterTable) -> None:
        table = node.table
        columns = self.tables.setdefault(table, {})
        for action in node.actions:
            if isinstance(action, AddColumn):
                columns[action.column.name] = action.column.type_name
                if action.column.primary_key:
                    self._check(table, Index(IndexKind.PRIMARY, (action.column.name,)))
                if action.column.unique:
                    self._check(table, Index(IndexKind.UNIQUE, (action.column.name,)))
            elif isinstance(action, ModifyColumn):
                columns.pop(action.old_name, None)
                columns[action.column.name] = action.column.type_name
            elif isinstance(action, DropColumn):
                columns.pop(action.name, None)
            elif isinstance(action, AddIndex):
                self._check(table, action.index)
            elif isinstance(action, RenameTable):
                self.tables[action.new_name] = self.tables.pop(table, columns)
                table = action.new_name

    def _check(self, table: str, index: Index) -> None:
        if index.kind is IndexKind.FOREIGN:
            return
        columns = self.tables.get(table, {})
        for name in index.columns:
            type_name = columns.get(name)
            if type_name in BLOB_TYPES:
                self.add(
                    Code.INDEX_TYPE_NO_BLOB,
                    f"Columns in index must not be BLOB but `{table}`.`{name}` is {type_name}",
                )


class IndexTypeNoBlobAdvisor(CheckerAdvisor[EmptyPayload]):
    """Disallow BLOB columns in primary keys, unique keys and indexes."""

    @property
    def rule_type(self) -> RuleType:
        return RuleType.INDEX_TYPE_NO_BLOB

    @property
    def dialects(self) -> frozenset[Dialect]:
        return MYSQL_DIALECTS

    def create_checker(
        self, ctx: Context, payload: EmptyPayload, status: AdviceStatus
    ) -> IndexTypeNoBlobChecker:
        return IndexTypeNoBlobChecker(ctx, payload, status)


class IndexKeyNumberLimitChecker(Checker[NumberPayload]):
    """Flags indexes with more columns than the configured number."""

    def enabled(self) -> bool:
        return self.payload.number > 0

    def enter(self, node: Any) -> Visit:
        if isinstance(node, CreateTable):
            for index in node.all_indexes:
                self._check(node.table, index)
        elif isinstance(node, AlterTable):
            for action in node.actions:
                if isinstance(action, AddIndex):
                    self._check(node.table, action.index)
        elif isinstance(node, CreateIndex):
            self._check(node.table, node.index)
        return Visit.SKIP

    def _check(self, table: str, index: Index) -> None:
        if index.kind is IndexKind.FOREIGN or len(index.columns) <= self.payload.number:
            return
        name = index.name or ("PRIMARY" if index.kind is IndexKind.PRIMARY else "")
        self.add(
            Code.INDEX_KEY_NUMBER_EXCEEDS_LIMIT,
            f"The number of index `{name}` in table `{table}` should be not greater than "
            f"{self.payload.number}",
        )


class IndexKeyNumberLimitAdvisor(CheckerAdvisor[NumberPayload]):
    """Limit the number of columns in one index."""

    payload_model = NumberPayload

    @property
    def rule_type(self) -> RuleType:
        return RuleType.INDEX_KEY_NUMBER_LIMIT

    def create_checker(
        self, ctx: Context, payload: NumberPayload, status: AdviceStatus
    ) -> IndexKeyNumberLimitChecker:
        return IndexKeyNumberLimitChecker(ctx, payload, status)
