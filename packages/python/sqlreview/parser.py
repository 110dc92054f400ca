"""Parser adapter: change script text to an ordered list of statements."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlglot import exp
from sqlglot.dialects.dialect import Dialect as SqlglotDialect
from sqlglot.errors import ParseError as SqlglotParseError
from sqlglot.errors import TokenError
from sqlglot.tokens import TokenType

from .ddl import read_ddl
from .exceptions import ParseError
from .nodes import Commit, Delete, DropTable, Insert, Query, Unknown, Update
from .rule import Dialect

if TYPE_CHECKING:
    from sqlglot.tokens import Token

    from .nodes import StatementNode

logger = logging.getLogger(__name__)

# MySQL character set names to Python codecs.
_CODECS = {
    "utf8mb4": "utf-8",
    "utf8mb3": "utf-8",
    "utf8": "utf-8",
    "latin1": "latin-1",
    "binary": "latin-1",
    "ascii": "ascii",
    "gbk": "gbk",
    "gb2312": "gb2312",
    "gb18030": "gb18030",
    "big5": "big5",
    "sjis": "shift_jis",
    "ujis": "euc_jp",
    "euckr": "euc_kr",
    "utf16": "utf-16-be",
    "utf16le": "utf-16-le",
    "utf32": "utf-32-be",
}

_QUERY_TYPES = (exp.Select, exp.Union, exp.Intersect, exp.Except)
_TOKEN_ERROR_LINE = re.compile(r"(?:[Ll]ine |from )(\d+)")


@dataclass(frozen=True)
class Statement:
    """One statement of a script.

    Attributes:
        text: Raw source text of the statement, without the trailing ';'.
        line: 1-based line of the statement's first token.
        node: Structural node.
        index: Position in the script, starting at 0.
    """

    text: str
    line: int
    node: StatementNode
    index: int


class Parser:
    """Splits and parses scripts for one dialect.

    Example:
        >>> parser = Parser(Dialect.MYSQL)
        >>> [s.line for s in parser.parse("SELECT 1;\\nSELECT 2")]
        [1, 2]
    """

    def __init__(self, dialect: Dialect | str, charset: str = "utf8mb4", collation: str = "") -> None:
        self.dialect = Dialect(dialect)
        self.charset = charset
        self.collation = collation
        self._sqlglot = SqlglotDialect.get_or_raise(self.dialect.sqlglot_dialect)

    def parse(self, sql: str | bytes) -> list[Statement]:
        """Parse a script into statements.

        Raises:
            ParseError: If any statement fails to parse. The whole script is rejected.
        """
        text = _decode(sql, self.charset)
        tokens = self._tokenize(text)

        statements: list[Statement] = []
        for chunk in _split(tokens):
            statements.append(
                Statement(
                    text=text[chunk[0].start : chunk[-1].end + 1],
                    line=chunk[0].line,
                    node=self._parse_chunk(chunk, text),
                    index=len(statements),
                )
            )
        logger.debug("Parsed %d statement(s) as %s", len(statements), self.dialect.value)
        return statements

    def _tokenize(self, text: str) -> list[Token]:
        try:
            return self._sqlglot.tokenize(text)
        except TokenError as e:
            cause = str(e.__cause__ or "")
            match = _TOKEN_ERROR_LINE.search(cause)
            line = int(match.group(1)) if match else 0
            raise ParseError(f"Failed to tokenize script: {e}", line=line) from e

    def _parse_chunk(self, chunk: list[Token], text: str) -> StatementNode:
        node = read_ddl(chunk)
        if node is not None:
            return node

        try:
            expressions = self._sqlglot.parser().parse(chunk, text)
        except SqlglotParseError as e:
            line = chunk[0].line
            message = str(e)
            if e.errors:
                line = e.errors[0].get("line") or line
                message = e.errors[0].get("description") or message
            raise ParseError(message, line=line) from e

        expression = next((e for e in expressions if e is not None), None)
        if expression is None:
            return Unknown(kind="EMPTY")
        return _convert(expression)


def parse_statements(
    sql: str | bytes,
    dialect: Dialect | str,
    *,
    charset: str = "utf8mb4",
    collation: str = "",
) -> list[Statement]:
    """Parse a script into statements. See Parser.parse()."""
    return Parser(dialect, charset=charset, collation=collation).parse(sql)


def _decode(sql: str | bytes, charset: str) -> str:
    if isinstance(sql, str):
        return sql
    codec = _CODECS.get(charset.lower(), charset)
    try:
        return sql.decode(codec)
    except LookupError as e:
        raise ParseError(f"Unknown character set '{charset}'") from e
    except UnicodeDecodeError as e:
        line = sql[: e.start].count(b"\n") + 1
        raise ParseError(f"Script is not valid {charset}: {e.reason}", line=line) from e


def _split(tokens: list[Token]) -> list[list[Token]]:
    chunks: list[list[Token]] = []
    current: list[Token] = []
    for token in tokens:
        if token.token_type == TokenType.SEMICOLON:
            if current:
                chunks.append(current)
            current = []
        else:
            current.append(token)
    if current:
        chunks.append(current)
    return chunks


def _convert(expression: exp.Expression) -> StatementNode:
    if isinstance(expression, exp.Subquery):
        expression = expression.unnest()
    if isinstance(expression, _QUERY_TYPES):
        return _query(expression)
    if isinstance(expression, exp.Insert):
        return _insert(expression)
    if isinstance(expression, exp.Update):
        return Update(
            table=_table_name(expression.this),
            has_where=expression.args.get("where") is not None,
            has_limit=expression.args.get("limit") is not None,
            has_order=expression.args.get("order") is not None,
            queries=_nested_queries(expression),
            expr=expression,
        )
    if isinstance(expression, exp.Delete):
        return Delete(
            table=_table_name(expression.this),
            has_where=expression.args.get("where") is not None,
            has_limit=expression.args.get("limit") is not None,
            has_order=expression.args.get("order") is not None,
            queries=_nested_queries(expression),
            expr=expression,
        )
    if isinstance(expression, exp.Drop) and str(expression.args.get("kind") or "").upper() == "TABLE":
        return DropTable(
            tables=tuple(table.name for table in expression.find_all(exp.Table)),
            if_exists=bool(expression.args.get("exists")),
        )
    if isinstance(expression, exp.Commit):
        return Commit()
    return Unknown(kind=expression.key.upper(), expr=expression)


def _query(expression: exp.Expression) -> Query:
    if isinstance(expression, exp.Select):
        return Query(
            kind="select",
            star=any(_is_star(projection) for projection in expression.expressions),
            has_from=expression.args.get("from") is not None
            or expression.args.get("from_") is not None,
            has_where=expression.args.get("where") is not None,
            queries=_nested_queries(expression),
            expr=expression,
        )
    return Query(kind=expression.key, queries=_nested_queries(expression), expr=expression)


def _is_star(projection: exp.Expression) -> bool:
    if isinstance(projection, exp.Star):
        return True
    return isinstance(projection, exp.Column) and isinstance(projection.this, exp.Star)


def _nested_queries(expression: exp.Expression) -> tuple[Query, ...]:
    """Queries nested directly in an expression (not inside another query)."""
    found: list[Query] = []

    def visit(node: exp.Expression) -> None:
        for child in node.iter_expressions():
            if isinstance(child, _QUERY_TYPES):
                found.append(_query(child))
            else:
                visit(child)

    visit(expression)
    return tuple(found)


def _insert(expression: exp.Insert) -> Insert:
    target = expression.this
    columns: tuple[str, ...] = ()
    if isinstance(target, exp.Schema):
        columns = tuple(column.name for column in target.expressions)

    source = expression.expression
    if isinstance(source, exp.Subquery):
        source = source.unnest()

    row_count = None
    query = None
    if isinstance(source, exp.Values):
        row_count = len(source.expressions)
    elif isinstance(source, _QUERY_TYPES):
        query = _query(source)

    return Insert(
        table=_table_name(target),
        columns=columns,
        row_count=row_count,
        query=query,
        expr=expression,
    )


def _table_name(node: exp.Expression | None) -> str:
    if node is None:
        return ""
    if isinstance(node, exp.Schema):
        node = node.this
    if isinstance(node, exp.Table):
        return node.name
    table = node.find(exp.Table)
    return table.name if table is not None else ""
