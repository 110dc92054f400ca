"""Advisors for column definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..advice import AdviceStatus, Code
from ..nodes import AddColumn, AlterTable, Column, CreateTable, ModifyColumn, Visit
from ..payload import StringArrayPayload
from ..rule import RuleType
from .base import Checker, CheckerAdvisor

if TYPE_CHECKING:
    from ..context import Context


class ColumnTypeDisallowListChecker(Checker[StringArrayPayload]):
    """Flags columns whose type is on the disallowed list."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.disallowed = {value.upper() for value in self.payload.values}

    def enabled(self) -> bool:
        return bool(self.disallowed)

    def enter(self, node: Any) -> Visit:
        if isinstance(node, CreateTable):
            for column in node.columns:
                self._check(node.table, column)
        elif isinstance(node, AlterTable):
            for action in node.actions:
                if isinstance(action, (AddColumn, ModifyColumn)):
                    self._check(node.table, action.column)
        return Visit.SKIP

    def _check(self, table: str, column: Column) -> None:
        type_name = column.type_name.upper()
        if type_name in self.disallowed:
            self.add(
                Code.DISABLED_COLUMN_TYPE,
                f"Disallow column type {type_name} but column `{table}`.`{column.name}` is",
            )


class ColumnTypeDisallowListAdvisor(CheckerAdvisor[StringArrayPayload]):
    """Reject columns whose base type is on a configured list, e.g. ["JSON", "BLOB"]."""

    payload_model = StringArrayPayload

    @property
    def rule_type(self) -> RuleType:
        return RuleType.COLUMN_TYPE_DISALLOW_LIST

    def create_checker(
        self, ctx: Context, payload: StringArrayPayload, status: AdviceStatus
    ) -> ColumnTypeDisallowListChecker:
        return ColumnTypeDisallowListChecker(ctx, payload, status)
