"""Engine configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ReviewConfig:
    """Defaults applied to review calls.

    Attributes:
        default_charset: Charset used when a call does not pass one.
        default_collation: Collation used when a call does not pass one.
        diagnostic_timeout: Seconds a review call may spend on diagnostic
            queries, or None for no deadline. A per-call timeout overrides it.
    """

    default_charset: str = "utf8mb4"
    default_collation: str = "utf8mb4_general_ci"
    diagnostic_timeout: float | None = 10.0

    def __post_init__(self) -> None:
        if self.diagnostic_timeout is not None and self.diagnostic_timeout <= 0:
            raise ValueError("diagnostic_timeout must be positive or None")
