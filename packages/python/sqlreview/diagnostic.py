"""Diagnostic EXPLAIN queries and positional decoding of their results.

EXPLAIN output is decoded by fixed row and column offsets. The offsets are a
contract with a specific server version, so each dialect carries a small
table of layouts keyed by the minimum server version they apply to.

Layouts:
    MySQL >= 5.7    12 columns, "rows" at column 9
    MySQL <  5.7    10 columns, "rows" at column 8
    TiDB  >= 4.0    5 columns, "estRows" at column 1 (decimal text)
    TiDB  <  4.0    4 columns, "count" at column 1 (decimal text)
    PostgreSQL      1 text column, "rows=N" in the plan line
"""

from __future__ import annotations

import concurrent.futures
import logging
import re
import time
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Protocol

from .exceptions import DiagnosticError
from .rule import Dialect

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

# Seconds between cancellation checks while a query runs.
_POLL_INTERVAL = 0.05


class Cursor(Protocol):
    """The DB-API 2.0 cursor surface used for diagnostic queries."""

    def execute(self, operation: str, *args: Any) -> Any: ...

    def fetchall(self) -> Sequence[Sequence[Any]]: ...

    def close(self) -> None: ...


class Connection(Protocol):
    """A read-only DB-API 2.0 connection owned by the caller."""

    def cursor(self) -> Cursor: ...


@dataclass(frozen=True)
class ExplainLayout:
    """Where the row estimate sits in one server version's EXPLAIN output.

    Attributes:
        name: Label used in error messages.
        columns: Exact column count every row must have.
        column: Column holding the estimate.
        rows: Row holding the estimate, per statement kind.
        pattern: For text plans, the pattern extracting the estimate.
    """

    name: str
    columns: int
    column: int
    rows: dict[str, int]
    pattern: re.Pattern[str] | None = None

    def row_for(self, kind: str) -> int:
        return self.rows.get(kind, 0)


_LAYOUTS: dict[Dialect, tuple[tuple[tuple[int, int], ExplainLayout], ...]] = {
    Dialect.MYSQL: (
        ((5, 7), ExplainLayout("mysql-5.7", 12, 9, {"insert": 1, "update": 0, "delete": 0})),
        ((0, 0), ExplainLayout("mysql-5.6", 10, 8, {"insert": 1, "update": 0, "delete": 0})),
    ),
    Dialect.TIDB: (
        ((4, 0), ExplainLayout("tidb-4.0", 5, 1, {"insert": 1, "update": 1, "delete": 1})),
        ((0, 0), ExplainLayout("tidb-3.0", 4, 1, {"insert": 1, "update": 1, "delete": 1})),
    ),
    Dialect.POSTGRES: (
        (
            (0, 0),
            ExplainLayout(
                "postgres",
                1,
                0,
                {"insert": 1, "update": 1, "delete": 1},
                pattern=re.compile(r"rows=(\d+)"),
            ),
        ),
    ),
}


def parse_server_version(text: str | None) -> tuple[int, int] | None:
    """Extract (major, minor) from a server version string.

    TiDB reports a MySQL-compatible prefix ("5.7.25-TiDB-v7.1.0"); the TiDB
    part wins when present.
    """
    if not text:
        return None
    marker = text.find("TiDB-")
    if marker >= 0:
        text = text[marker + len("TiDB-") :]
    match = re.search(r"(\d+)\.(\d+)", text)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def layout_for(dialect: Dialect, server_version: str | None = None) -> ExplainLayout:
    """Select the EXPLAIN layout for a dialect and server version.

    An unknown version selects the newest layout.

    Raises:
        DiagnosticError: If the dialect has no layout.
    """
    layouts = _LAYOUTS.get(dialect)
    if not layouts:
        raise DiagnosticError(f"No EXPLAIN layout for dialect {dialect.value}")
    version = parse_server_version(server_version)
    if version is None:
        return layouts[0][1]
    for minimum, layout in layouts:
        if version >= minimum:
            return layout
    return layouts[-1][1]


def to_int64(value: Any) -> int:
    """Coerce a driver scalar (int, Decimal, float, numeric text or bytes) to a 64-bit int.

    Raises:
        DiagnosticError: If the value is not numeric or does not fit in 64 bits.
    """
    if isinstance(value, bool):
        raise DiagnosticError(f"Unexpected boolean row estimate {value!r}")
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("ascii", errors="replace")

    if isinstance(value, int):
        result = value
    elif isinstance(value, (Decimal, float)):
        try:
            result = int(value)
        except (ValueError, OverflowError) as e:
            raise DiagnosticError(f"Invalid row estimate {value!r}") from e
    elif isinstance(value, str):
        text = value.strip()
        try:
            result = int(text)
        except ValueError:
            try:
                result = int(Decimal(text))
            except (InvalidOperation, ValueError, OverflowError) as e:
                raise DiagnosticError(f"Invalid row estimate {value!r}") from e
    else:
        raise DiagnosticError(f"Unexpected row estimate type {type(value).__name__}")

    if not _INT64_MIN <= result <= _INT64_MAX:
        raise DiagnosticError(f"Row estimate {result} does not fit in 64 bits")
    return result


def decode_rows(rows: Sequence[Sequence[Any]], layout: ExplainLayout, kind: str) -> int:
    """Read the row estimate out of EXPLAIN rows.

    Raises:
        DiagnosticError: If the result does not have the layout's shape.
    """
    index = layout.row_for(kind)
    if len(rows) <= index:
        raise DiagnosticError(
            f"Expected at least {index + 1} EXPLAIN row(s) for {layout.name}, got {len(rows)}"
        )
    row = rows[index]
    if len(row) != layout.columns:
        raise DiagnosticError(
            f"Expected {layout.columns} EXPLAIN column(s) for {layout.name}, got {len(row)}"
        )
    value = row[layout.column]
    if value is None:
        raise DiagnosticError(f"EXPLAIN row {index} has no row estimate")
    if layout.pattern is not None:
        text = value.decode() if isinstance(value, (bytes, bytearray)) else str(value)
        match = layout.pattern.search(text)
        if match is None:
            raise DiagnosticError(f"No row estimate in plan line {text!r}")
        value = match.group(1)
    return to_int64(value)


def _run_query(cursor: Cursor, operation: str) -> Sequence[Sequence[Any]]:
    try:
        cursor.execute(operation)
        return cursor.fetchall()
    finally:
        cursor.close()


def _wait(ctx: Context, future: concurrent.futures.Future) -> Sequence[Sequence[Any]]:
    """Wait for a running query until it returns, is cancelled, or runs past the deadline."""
    while True:
        timeout = None
        if ctx.deadline is not None:
            timeout = max(ctx.deadline - time.monotonic(), 0.0)
        if ctx.cancel_event is not None:
            timeout = _POLL_INTERVAL if timeout is None else min(timeout, _POLL_INTERVAL)
        try:
            return future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            if future.done():
                raise
        if ctx.cancelled:
            raise DiagnosticError("Diagnostic query cancelled")
        if ctx.expired:
            raise DiagnosticError("Diagnostic query deadline exceeded")


def explain(ctx: Context, statement: str, kind: str) -> int:
    """Run EXPLAIN for one statement and return the estimated row count.

    The query runs on a worker thread so the wait is bounded by ctx.deadline
    and ctx.cancel_event. An abandoned query keeps its worker until the driver
    returns; its cursor is closed then.

    Args:
        ctx: Invocation context; its connection must be set.
        statement: Statement text.
        kind: "insert", "update" or "delete"; selects the row of the estimate.

    Raises:
        DiagnosticError: On cancellation, deadline expiry, driver failure, or
            an unexpected result shape.
    """
    if ctx.connection is None:
        raise DiagnosticError("No database connection")
    if ctx.cancelled:
        logger.warning("EXPLAIN skipped for rule %s: cancelled", ctx.rule.type)
        raise DiagnosticError("Diagnostic query cancelled")
    if ctx.expired:
        logger.warning("EXPLAIN skipped for rule %s: deadline exceeded", ctx.rule.type)
        raise DiagnosticError("Diagnostic query deadline exceeded")

    layout = layout_for(ctx.rule.dialect, ctx.server_version)
    cursor = ctx.connection.cursor()
    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=1, thread_name_prefix="sqlreview-explain"
    )
    future = executor.submit(_run_query, cursor, f"EXPLAIN {statement}")
    executor.shutdown(wait=False)
    try:
        rows = _wait(ctx, future)
    except DiagnosticError as e:
        logger.warning("EXPLAIN abandoned for rule %s: %s", ctx.rule.type, e.message)
        raise
    except Exception as e:
        # DB-API drivers each raise their own Error hierarchy.
        logger.warning("EXPLAIN failed for rule %s: %s", ctx.rule.type, e)
        raise DiagnosticError(str(e)) from e

    if ctx.cancelled:
        logger.warning("EXPLAIN result discarded for rule %s: cancelled", ctx.rule.type)
        raise DiagnosticError("Diagnostic query cancelled")
    if ctx.expired:
        logger.warning("EXPLAIN result discarded for rule %s: deadline exceeded", ctx.rule.type)
        raise DiagnosticError("Diagnostic query deadline exceeded")
    return decode_rows(rows, layout, kind)
