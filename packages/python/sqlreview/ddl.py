"""Structural reader for CREATE TABLE, ALTER TABLE and CREATE INDEX.

How well sqlglot parses MySQL DDL depends on the release. The 25.x line turns
ADD PRIMARY KEY(...) and ADD UNIQUE INDEX(...) into bogus columns and loses
prefix-length key parts. Recent releases build proper exp.Create / exp.Alter
trees for the same input. These three statements are therefore read directly
from the sqlglot token stream, whose shape is stable across releases, into the
structural nodes the rules need. The reader is strict about names and bracket
balance and tolerant of options it does not model.
"""


from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlglot.tokens import TokenType

from .exceptions import ParseError
from .nodes import (
    AddColumn,
    AddIndex,
    AlterAction,
    AlterTable,
    Column,
    CreateIndex,
    CreateTable,
    DropColumn,
    DropIndex,
    Index,
    IndexKind,
    ModifyColumn,
    OtherAlter,
    RenameTable,
    TableOption,
)

if TYPE_CHECKING:
    from sqlglot.tokens import Token

    from .nodes import StatementNode


_TABLE_MODIFIERS = {"TEMPORARY", "TEMP", "GLOBAL", "LOCAL", "UNLOGGED"}
_INDEX_MODIFIERS = {"UNIQUE", "FULLTEXT", "SPATIAL"}
_CONSTRAINT_WORDS = {
    "CONSTRAINT",
    "PRIMARY",
    "UNIQUE",
    "FOREIGN",
    "INDEX",
    "KEY",
    "FULLTEXT",
    "SPATIAL",
    "CHECK",
}


@dataclass(frozen=True)
class _Word:
    """A token flattened for the reader.

    Multi-word keyword tokens ("PRIMARY KEY") are split into one word each.
    """

    text: str
    kind: str  # word | name | string | number | punct
    line: int

    @property
    def upper(self) -> str:
        return self.text.upper() if self.kind == "word" else ""


def _words(tokens: list[Token]) -> list[_Word]:
    words: list[_Word] = []
    for token in tokens:
        token_type = token.token_type
        text = token.text
        if token_type == TokenType.IDENTIFIER:
            words.append(_Word(text, "name", token.line))
        elif token_type.name.endswith("STRING"):
            words.append(_Word(text, "string", token.line))
        elif token_type == TokenType.NUMBER:
            words.append(_Word(text, "number", token.line))
        elif text and not (text[0].isalnum() or text[0] in "_$@"):
            words.append(_Word(text, "punct", token.line))
        else:
            for part in text.split():
                words.append(_Word(part, "word", token.line))
    return words


class _Reader:
    def __init__(self, words: list[_Word]) -> None:
        self._words = words
        self._pos = 0

    def peek(self, offset: int = 0) -> _Word | None:
        index = self._pos + offset
        return self._words[index] if index < len(self._words) else None

    def upper(self, offset: int = 0) -> str:
        word = self.peek(offset)
        return word.upper if word is not None else ""

    def at_end(self) -> bool:
        return self._pos >= len(self._words)

    def advance(self) -> _Word:
        word = self.peek()
        if word is None:
            raise self.error("unexpected end of statement")
        self._pos += 1
        return word

    def match(self, *keywords: str) -> bool:
        for offset, keyword in enumerate(keywords):
            if self.upper(offset) != keyword:
                return False
        self._pos += len(keywords)
        return True

    def expect(self, *keywords: str) -> None:
        if not self.match(*keywords):
            raise self.error(f"expected {' '.join(keywords)}")

    def is_punct(self, text: str, offset: int = 0) -> bool:
        word = self.peek(offset)
        return word is not None and word.kind == "punct" and word.text == text

    def match_punct(self, text: str) -> bool:
        if self.is_punct(text):
            self._pos += 1
            return True
        return False

    def expect_punct(self, text: str) -> None:
        if not self.match_punct(text):
            raise self.error(f"expected '{text}'")

    def name(self) -> str:
        word = self.peek()
        if word is None or word.kind not in ("word", "name"):
            raise self.error("expected a name")
        self._pos += 1
        return word.text

    def qualified_name(self) -> str:
        """Read db.table and return the last part."""
        name = self.name()
        while self.match_punct("."):
            name = self.name()
        return name

    def skip_group(self) -> None:
        """Consume a parenthesized group, including nested groups."""
        self.expect_punct("(")
        depth = 1
        while depth:
            word = self.advance()
            if word.kind == "punct":
                if word.text == "(":
                    depth += 1
                elif word.text == ")":
                    depth -= 1

    def skip_to_delimiter(self) -> None:
        """Consume words up to a ',' or ')' at the current depth."""
        while not self.at_end():
            if self.is_punct(",") or self.is_punct(")"):
                return
            if self.is_punct("("):
                self.skip_group()
            else:
                self._pos += 1

    def error(self, message: str) -> ParseError:
        word = self.peek()
        if word is None and self._words:
            word = self._words[-1]
            return ParseError(f"{message} at end of statement", line=word.line)
        if word is None:
            return ParseError(message)
        return ParseError(f"{message} near '{word.text}'", line=word.line)


def read_ddl(tokens: list[Token]) -> StatementNode | None:
    """Read a DDL statement, or return None if it is not one this reader handles.

    Raises:
        ParseError: If the statement is malformed.
    """
    words = _words(tokens)
    uppers = [word.upper for word in words[:8]]
    if not uppers:
        return None

    if uppers[0] == "ALTER" and "TABLE" in uppers[1:3]:
        return _alter_table(_Reader(words))

    if uppers[0] == "CREATE":
        position = 1
        while position < len(uppers) and uppers[position] in _TABLE_MODIFIERS:
            position += 1
        if position < len(uppers) and uppers[position] == "TABLE":
            return _create_table(_Reader(words))
        position = 1
        if position < len(uppers) and uppers[position] in _INDEX_MODIFIERS:
            position += 1
        if position < len(uppers) and uppers[position] == "INDEX":
            return _create_index(_Reader(words))

    return None


def _create_table(r: _Reader) -> CreateTable:
    r.expect("CREATE")
    temporary = False
    while r.upper() in _TABLE_MODIFIERS:
        temporary = temporary or r.upper() in ("TEMPORARY", "TEMP")
        r.advance()
    r.expect("TABLE")
    if_not_exists = r.match("IF", "NOT", "EXISTS")
    table = r.qualified_name()

    columns: list[Column] = []
    indexes: list[Index] = []
    like: str | None = None
    as_select = False

    if r.match("LIKE"):
        like = r.qualified_name()
    elif r.is_punct("(") and r.upper(1) == "LIKE":
        r.advance()
        r.advance()
        like = r.qualified_name()
        r.expect_punct(")")
    elif r.is_punct("(") and r.upper(1) not in ("SELECT", "WITH"):
        r.advance()
        while True:
            definition = _definition(r)
            if isinstance(definition, Column):
                columns.append(definition)
            elif isinstance(definition, Index):
                indexes.append(definition)
            if r.match_punct(","):
                continue
            r.expect_punct(")")
            break

    engine: str | None = None
    while not r.at_end():
        word = r.upper()
        if r.is_punct("("):
            if r.upper(1) in ("SELECT", "WITH"):
                as_select = True
                break
            r.skip_group()
        elif word == "WITH" and r.is_punct("(", 1):
            r.advance()
            r.skip_group()
        elif word in ("AS", "SELECT", "WITH", "IGNORE", "REPLACE"):
            as_select = True
            break
        elif word == "ENGINE":
            r.advance()
            r.match_punct("=")
            engine = r.name()
        else:
            r.advance()

    return CreateTable(
        table=table,
        columns=tuple(columns),
        indexes=tuple(indexes),
        engine=engine,
        as_select=as_select,
        like=like,
        temporary=temporary,
        if_not_exists=if_not_exists,
    )


def _definition(r: _Reader) -> Column | Index | None:
    """Read one element of a CREATE TABLE body or an ADD constraint action."""
    constraint: str | None = None
    if r.match("CONSTRAINT") and r.upper() not in ("PRIMARY", "UNIQUE", "FOREIGN", "CHECK"):
        constraint = r.name()

    index: Index | None = None
    word = r.upper()
    if r.match("PRIMARY", "KEY"):
        index = Index(IndexKind.PRIMARY, _key_parts(r), name=constraint)
    elif word == "UNIQUE":
        r.advance()
        _ = r.match("INDEX") or r.match("KEY")
        name = _index_name(r) or constraint
        index = Index(IndexKind.UNIQUE, _key_parts(r), name=name)
    elif r.match("FOREIGN", "KEY"):
        name = _index_name(r) or constraint
        columns = _key_parts(r)
        references = r.qualified_name() if r.match("REFERENCES") else None
        index = Index(IndexKind.FOREIGN, columns, name=name, references=references)
    elif word in ("INDEX", "KEY"):
        r.advance()
        name = _index_name(r)
        index = Index(IndexKind.INDEX, _key_parts(r), name=name)
    elif word in ("FULLTEXT", "SPATIAL"):
        r.advance()
        _ = r.match("INDEX") or r.match("KEY")
        name = _index_name(r)
        index = Index(IndexKind(word), _key_parts(r), name=name)
    elif word in ("CHECK", "EXCLUDE"):
        r.advance()
    elif constraint is not None:
        raise r.error("expected a constraint")
    else:
        return _column(r)

    r.skip_to_delimiter()
    return index


def _index_name(r: _Reader) -> str | None:
    if r.is_punct("(") or r.upper() == "USING":
        return None
    return r.name()


def _key_parts(r: _Reader) -> tuple[str, ...]:
    """Read "(col[(len)] [ASC|DESC], ...)" and return the column names.

    Expression key parts "((expr))" have no column and are skipped.
    """
    if r.match("USING"):
        r.advance()
    r.expect_punct("(")
    columns: list[str] = []
    while True:
        if r.is_punct("("):
            r.skip_group()
        else:
            name = r.name()
            prefixed = r.is_punct("(") and r.peek(1) is not None and r.peek(1).kind == "number"
            # name(...) without a length is a function call, e.g. lower(name)
            if prefixed or not r.is_punct("("):
                columns.append(name)
        r.skip_to_delimiter()
        if r.match_punct(","):
            continue
        r.expect_punct(")")
        break
    return tuple(columns)


def _column(r: _Reader) -> Column:
    name = r.name()
    type_word = r.peek()
    if type_word is None or type_word.kind not in ("word", "name"):
        raise r.error(f"expected a type for column '{name}'")
    r.advance()
    type_name = type_word.text.lower()
    if r.upper() in ("VARYING", "PRECISION"):
        type_name = f"{type_name} {r.advance().text.lower()}"
    if r.is_punct("("):
        r.skip_group()

    nullable: bool | None = None
    has_default = False
    auto_increment = False
    comment: str | None = None
    primary_key = False
    unique = False
    references: str | None = None

    while not r.at_end() and not (r.is_punct(",") or r.is_punct(")")):
        if r.match("NOT", "NULL"):
            nullable = False
        elif r.match("NULL"):
            nullable = True
        elif r.match("DEFAULT"):
            has_default = True
            _skip_value(r)
        elif r.match("AUTO_INCREMENT") or r.match("AUTOINCREMENT"):
            auto_increment = True
        elif r.match("PRIMARY", "KEY"):
            primary_key = True
        elif r.match("UNIQUE"):
            unique = True
            r.match("KEY")
        elif r.match("KEY"):
            primary_key = True
        elif r.match("COMMENT"):
            comment = r.advance().text
        elif r.match("REFERENCES"):
            references = r.qualified_name()
            if r.is_punct("("):
                r.skip_group()
        elif r.is_punct("("):
            r.skip_group()
        else:
            r.advance()

    return Column(
        name=name,
        type_name=type_name,
        nullable=nullable,
        has_default=has_default,
        auto_increment=auto_increment,
        comment=comment,
        primary_key=primary_key,
        unique=unique,
        references=references,
    )


def _skip_value(r: _Reader) -> None:
    """Consume a DEFAULT value: literal, signed number, function call or group."""
    if r.is_punct("("):
        r.skip_group()
        return
    word = r.advance()
    if word.kind == "punct" and word.text in ("-", "+") and not r.at_end():
        r.advance()
    if r.is_punct("("):
        r.skip_group()
    while r.is_punct("::"):
        r.advance()
        r.advance()


def _create_index(r: _Reader) -> CreateIndex:
    r.expect("CREATE")
    kind = IndexKind.INDEX
    if r.upper() in _INDEX_MODIFIERS:
        kind = IndexKind(r.advance().upper)
    r.expect("INDEX")
    r.match("CONCURRENTLY")
    r.match("IF", "NOT", "EXISTS")
    name = None if r.upper() in ("ON", "USING") else r.qualified_name()
    if r.match("USING"):
        r.advance()
    r.expect("ON")
    r.match("ONLY")
    table = r.qualified_name()
    return CreateIndex(table=table, index=Index(kind, _key_parts(r), name=name))


def _alter_table(r: _Reader) -> AlterTable:
    r.expect("ALTER")
    _ = r.match("ONLINE") or r.match("IGNORE")
    r.expect("TABLE")
    r.match("IF", "EXISTS")
    r.match("ONLY")
    table = r.qualified_name()

    actions: list[AlterAction] = []
    while not r.at_end():
        actions.extend(_alter_action(r))
        if not r.match_punct(","):
            break
    if not r.at_end():
        raise r.error("unexpected token")
    return AlterTable(table=table, actions=tuple(actions))


def _alter_action(r: _Reader) -> list[AlterAction]:
    if r.match("ADD"):
        if r.upper() in _CONSTRAINT_WORDS:
            definition = _definition(r)
            if isinstance(definition, Index):
                return [AddIndex(definition)]
            return [OtherAlter("ADD CHECK")]
        r.match("COLUMN")
        r.match("IF", "NOT", "EXISTS")
        if r.match_punct("("):
            added: list[AlterAction] = []
            while True:
                added.append(AddColumn(_column(r)))
                if r.match_punct(","):
                    continue
                r.expect_punct(")")
                break
            return added
        return [AddColumn(_column(r))]

    if r.match("DROP"):
        action: AlterAction
        if r.match("PRIMARY", "KEY"):
            action = DropIndex(IndexKind.PRIMARY)
        elif r.match("FOREIGN", "KEY"):
            action = DropIndex(IndexKind.FOREIGN, r.name())
        elif r.upper() in ("INDEX", "KEY"):
            r.advance()
            action = DropIndex(IndexKind.INDEX, r.name())
        elif r.match("CONSTRAINT"):
            r.match("IF", "EXISTS")
            action = DropIndex(None, r.name())
        elif r.match("CHECK"):
            r.name()
            action = OtherAlter("DROP CHECK")
        else:
            r.match("COLUMN")
            r.match("IF", "EXISTS")
            action = DropColumn(r.name())
        r.skip_to_delimiter()
        return [action]

    if r.match("MODIFY"):
        r.match("COLUMN")
        column = _column(r)
        return [ModifyColumn(column, column.name)]

    if r.match("CHANGE"):
        r.match("COLUMN")
        old_name = r.name()
        return [ModifyColumn(_column(r), old_name)]

    if r.match("RENAME"):
        if r.upper() in ("COLUMN", "INDEX", "KEY", "CONSTRAINT") or r.upper(1) == "TO":
            keyword = r.upper() if r.upper() in ("INDEX", "KEY", "CONSTRAINT") else "COLUMN"
            r.skip_to_delimiter()
            return [OtherAlter(f"RENAME {keyword}")]
        _ = r.match("TO") or r.match("AS")
        return [RenameTable(r.qualified_name())]

    if r.upper() == "ENGINE":
        r.advance()
        r.match_punct("=")
        return [TableOption("ENGINE", r.name())]

    keyword = r.advance()
    r.skip_to_delimiter()
    return [OtherAlter(keyword.text.upper())]
