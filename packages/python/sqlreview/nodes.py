"""Structural nodes for parsed statements.

The node set is closed: every statement parses into exactly one of the
statement classes below. walk() is the only traversal; the enter callback
decides per node whether to descend into its children.

DML nodes keep the sqlglot expression they were built from so rules can
inspect expressions (LIKE patterns, ORDER BY functions) without the node
set having to model every SQL expression.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from sqlglot.expressions import Expression


class Visit(Enum):
    """Decision returned by an enter callback."""

    DESCEND = "descend"
    SKIP = "skip"


class IndexKind(str, Enum):
    PRIMARY = "PRIMARY"
    UNIQUE = "UNIQUE"
    INDEX = "INDEX"
    FULLTEXT = "FULLTEXT"
    SPATIAL = "SPATIAL"
    FOREIGN = "FOREIGN"


@dataclass(frozen=True)
class Column:
    """A column definition.

    Attributes:
        name: Column name.
        type_name: Lower-cased base type, e.g. "int", "varchar", "mediumblob".
        nullable: False for NOT NULL, True for explicit NULL, None if unspecified.
        has_default: Whether a DEFAULT clause is present.
        auto_increment: Whether AUTO_INCREMENT is set.
        comment: Column comment, if any.
        primary_key: Whether the column is declared PRIMARY KEY inline.
        unique: Whether the column is declared UNIQUE inline.
        references: Referenced table of an inline REFERENCES clause.
    """

    name: str
    type_name: str
    nullable: bool | None = None
    has_default: bool = False
    auto_increment: bool = False
    comment: str | None = None
    primary_key: bool = False
    unique: bool = False
    references: str | None = None


@dataclass(frozen=True)
class Index:
    """An index or key: table-level constraint, ADD INDEX action or CREATE INDEX."""

    kind: IndexKind
    columns: tuple[str, ...] = ()
    name: str | None = None
    references: str | None = None


# ALTER TABLE actions


@dataclass(frozen=True)
class AddColumn:
    column: Column


@dataclass(frozen=True)
class AddIndex:
    index: Index


@dataclass(frozen=True)
class DropColumn:
    name: str


@dataclass(frozen=True)
class DropIndex:
    kind: IndexKind | None
    name: str | None = None


@dataclass(frozen=True)
class ModifyColumn:
    column: Column
    old_name: str


@dataclass(frozen=True)
class RenameTable:
    new_name: str


@dataclass(frozen=True)
class TableOption:
    name: str
    value: str


@dataclass(frozen=True)
class OtherAlter:
    keyword: str


AlterAction = Union[
    AddColumn, AddIndex, DropColumn, DropIndex, ModifyColumn, RenameTable, TableOption, OtherAlter
]


# Statements


@dataclass(frozen=True)
class CreateTable:
    table: str
    columns: tuple[Column, ...] = ()
    indexes: tuple[Index, ...] = ()
    engine: str | None = None
    as_select: bool = False
    like: str | None = None
    temporary: bool = False
    if_not_exists: bool = False

    @property
    def all_indexes(self) -> tuple[Index, ...]:
        """Table-level indexes plus the ones declared inline on columns."""
        inline: list[Index] = []
        for column in self.columns:
            if column.primary_key:
                inline.append(Index(IndexKind.PRIMARY, (column.name,)))
            if column.unique:
                inline.append(Index(IndexKind.UNIQUE, (column.name,)))
            if column.references:
                inline.append(
                    Index(IndexKind.FOREIGN, (column.name,), references=column.references)
                )
        return tuple(inline) + self.indexes


@dataclass(frozen=True)
class AlterTable:
    table: str
    actions: tuple[AlterAction, ...] = ()


@dataclass(frozen=True)
class CreateIndex:
    table: str
    index: Index


@dataclass(frozen=True)
class DropTable:
    tables: tuple[str, ...]
    if_exists: bool = False


@dataclass(frozen=True)
class Query:
    """A SELECT or a set operation (UNION, INTERSECT, EXCEPT).

    Attributes:
        kind: "select", "union", "intersect" or "except".
        star: Whether the projection contains * or t.*.
        has_from: Whether a FROM clause is present.
        has_where: Whether a WHERE clause is present.
        queries: Directly nested queries (subqueries, CTEs, set operation branches).
    """

    kind: str
    star: bool = False
    has_from: bool = False
    has_where: bool = False
    queries: tuple[Query, ...] = ()
    expr: Expression | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Insert:
    """INSERT or REPLACE.

    Attributes:
        row_count: Number of VALUES rows, None when rows come from a query.
        query: Source query of INSERT ... SELECT.
    """

    table: str
    columns: tuple[str, ...] = ()
    row_count: int | None = None
    query: Query | None = None
    expr: Expression | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Update:
    table: str
    has_where: bool = False
    has_limit: bool = False
    has_order: bool = False
    queries: tuple[Query, ...] = ()
    expr: Expression | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Delete:
    table: str
    has_where: bool = False
    has_limit: bool = False
    has_order: bool = False
    queries: tuple[Query, ...] = ()
    expr: Expression | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Commit:
    pass


@dataclass(frozen=True)
class Unknown:
    """Any statement without a dedicated node (SET, USE, CREATE VIEW, ...)."""

    kind: str
    expr: Expression | None = field(default=None, compare=False, repr=False)


StatementNode = Union[
    CreateTable, AlterTable, CreateIndex, DropTable, Query, Insert, Update, Delete, Commit, Unknown
]
Node = Union[StatementNode, AlterAction, Column, Index]


def children(node: Any) -> tuple[Any, ...]:
    """Direct structural children of a node, in source order."""
    if isinstance(node, CreateTable):
        return node.columns + node.indexes
    if isinstance(node, AlterTable):
        return node.actions
    if isinstance(node, AddColumn):
        return (node.column,)
    if isinstance(node, AddIndex):
        return (node.index,)
    if isinstance(node, ModifyColumn):
        return (node.column,)
    if isinstance(node, CreateIndex):
        return (node.index,)
    if isinstance(node, Insert):
        return (node.query,) if node.query is not None else ()
    if isinstance(node, (Query, Update, Delete)):
        return node.queries
    return ()


def walk(node: Any, enter: Callable[[Any], Visit]) -> None:
    """Depth-first traversal. Children are skipped when enter returns SKIP."""
    if enter(node) is Visit.SKIP:
        return
    for child in children(node):
        walk(child, enter)


def iter_nodes(node: Any) -> Iterator[Any]:
    """Every node of a tree, depth-first, parents before children."""
    yield node
    for child in children(node):
        yield from iter_nodes(child)
