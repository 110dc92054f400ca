"""Per-invocation context handed to advisors."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import threading

    from .diagnostic import Connection
    from .rule import Rule


@dataclass(frozen=True)
class Context:
    """Everything one advisor needs for one rule evaluation.

    A Context is built per rule per review call and never reused.

    Attributes:
        rule: The rule being evaluated.
        charset: Charset of the script.
        collation: Collation of the script.
        connection: Optional read-only DB-API 2.0 connection for diagnostic queries.
        server_version: Version string of the connected server, if known.
        cancel_event: Set by the caller to cancel pending diagnostic queries.
        deadline: time.monotonic() value after which diagnostic queries are not run.
    """

    rule: Rule
    charset: str = "utf8mb4"
    collation: str = ""
    connection: Connection | None = None
    server_version: str | None = None
    cancel_event: threading.Event | None = None
    deadline: float | None = None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline
